# hydroscan/repos/cart_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from hydroscan.data.models.cart_item import CartItemModel
from hydroscan.domain.enums import WaterType


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def get_items(self, owner_id: str) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.owner_id == owner_id)
            .order_by(CartItemModel.added_at, CartItemModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_mergeable(
        self,
        owner_id: str,
        product_name: str,
        water_type: WaterType,
        recipient_name: str,
    ) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.owner_id == owner_id,
            CartItemModel.product_name == product_name,
            CartItemModel.water_type == water_type,
            CartItemModel.recipient_name == recipient_name,
        )
        return self.db.execute(stmt).scalars().first()

    def add_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def clear(self, owner_id: str) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.owner_id == owner_id))
        return result.rowcount
