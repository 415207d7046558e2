from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from hydroscan.data.database import Base
from hydroscan.data.models._types import enum_column_type
from hydroscan.domain.enums import ProductCategory, WaterType
from hydroscan.domain.products import ProductVariant, Uom


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)

    product_name = Column(String(120), nullable=False)
    category = Column(enum_column_type(ProductCategory), nullable=False)
    water_type = Column(enum_column_type(WaterType), nullable=False)
    uom = Column(String(32), nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price_centavos = Column(Integer, nullable=False)

    recipient_name = Column(String(200), nullable=False)
    recipient_address = Column(String(300), nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity"),
        CheckConstraint("unit_price_centavos >= 0", name="ck_cart_items_price"),
    )

    @property
    def variant(self) -> ProductVariant:
        return ProductVariant(self.category, self.water_type, Uom.parse(self.uom))

    @property
    def line_total_centavos(self) -> int:
        return self.quantity * self.unit_price_centavos
