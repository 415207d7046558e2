from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from hydroscan.data.database import Base
from hydroscan.data.models._types import enum_column_type
from hydroscan.domain.enums import OrderStatus, ProductCategory, WaterType
from hydroscan.domain.products import ProductVariant, Uom


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    order_number = Column(String(32), nullable=False, unique=True)

    order_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    status = Column(enum_column_type(OrderStatus), nullable=False, default=OrderStatus.PROCESSING)
    is_paid = Column(Boolean, nullable=False, default=False)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    # total_amount is after the HydroCoin discount
    total_amount_centavos = Column(Integer, nullable=False)
    discount_centavos = Column(Integer, nullable=False, default=0)
    coins_used = Column(Integer, nullable=False, default=0)
    total_item_count = Column(Integer, nullable=False)

    is_scheduled = Column(Boolean, nullable=False, default=False)
    pickup_date = Column(Date, nullable=True)
    delivery_date = Column(Date, nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    __table_args__ = (
        CheckConstraint("total_amount_centavos >= 0", name="ck_orders_total"),
        CheckConstraint("total_item_count >= 0", name="ck_orders_item_count"),
    )

    @property
    def subtotal_centavos(self) -> int:
        return sum(i.line_total_centavos for i in self.items)


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    product_name = Column(String(120), nullable=False)
    category = Column(enum_column_type(ProductCategory), nullable=False)
    water_type = Column(enum_column_type(WaterType), nullable=False)
    uom = Column(String(32), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_centavos = Column(Integer, nullable=False)

    recipient_name = Column(String(200), nullable=False)
    recipient_address = Column(String(300), nullable=False)

    order = relationship("OrderModel", back_populates="items")

    @property
    def variant(self) -> ProductVariant:
        return ProductVariant(self.category, self.water_type, Uom.parse(self.uom))

    @property
    def line_total_centavos(self) -> int:
        return self.quantity * self.unit_price_centavos


class OrderNumberSequenceModel(Base):
    """Single-row counter; order numbers are issued from it and never handed out twice."""

    __tablename__ = "order_number_sequence"

    id = Column(Integer, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
