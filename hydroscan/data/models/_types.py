from sqlalchemy import Enum


def enum_column_type(enum_cls):
    #store the label ("Mineral"), not the member name, so rows stay readable
    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
