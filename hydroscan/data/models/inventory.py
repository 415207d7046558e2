from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint

from hydroscan.data.database import Base


class InventoryModel(Base):
    __tablename__ = "inventory"

    key = Column(String(64), primary_key=True)
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_non_negative"),)
