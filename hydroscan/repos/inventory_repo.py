# hydroscan/repos/inventory_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hydroscan.data.models.inventory import InventoryModel


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> InventoryModel | None:
        return self.db.get(InventoryModel, key)

    def get_or_create(self, key: str) -> InventoryModel:
        row = self.get(key)
        if row is None:
            row = InventoryModel(key=key, quantity_on_hand=0)
            self.db.add(row)
            self.db.flush()
        return row

    def list_all(self) -> list[InventoryModel]:
        return list(self.db.execute(select(InventoryModel).order_by(InventoryModel.key).execution_options(populate_existing=True)).scalars().all())

    def current_quantity(self, key: str) -> int | None:
        # column select goes to the database, not the identity map
        stmt = select(InventoryModel.quantity_on_hand).where(InventoryModel.key == key)
        return self.db.execute(stmt).scalar_one_or_none()

    def compare_and_set(self, key: str, expected: int, quantity: int) -> int:
        # writes only if nobody changed the count since it was read
        result = self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.key == key, InventoryModel.quantity_on_hand == expected)
            .values(quantity_on_hand=quantity)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
