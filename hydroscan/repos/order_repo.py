# hydroscan/repos/order_repo.py
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from hydroscan.data.models.order import OrderModel, OrderNumberSequenceModel
from hydroscan.domain.enums import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders(self, owner_id: str, status: OrderStatus | None = None) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.owner_id == owner_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        if status is not None:
            stmt = stmt.where(OrderModel.status == status)
        return list(self.db.execute(stmt).scalars().all())

    def orders_between(
        self,
        owner_id: str,
        start: date,
        end: date,
        exclude_status: OrderStatus | None = None,
    ) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(
                OrderModel.owner_id == owner_id,
                OrderModel.order_date >= start,
                OrderModel.order_date <= end,
            )
            .order_by(OrderModel.order_date, OrderModel.id)
        )
        if exclude_status is not None:
            stmt = stmt.where(OrderModel.status != exclude_status)
        return list(self.db.execute(stmt).scalars().all())

    def order_dates(self, owner_id: str) -> list[date]:
        stmt = (
            select(OrderModel.order_date)
            .where(OrderModel.owner_id == owner_id)
            .distinct()
            .order_by(OrderModel.order_date)
        )
        return list(self.db.execute(stmt).scalars().all())

    def owner_ids(self) -> list[str]:
        stmt = select(OrderModel.owner_id).distinct()
        return list(self.db.execute(stmt).scalars().all())

    def update_status(
        self,
        order_id: int,
        old_status: OrderStatus,
        new_data: dict,
    ) -> int:
        # compare-and-write: only touches the row if nobody changed the status meanwhile
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == old_status)
            .values(**new_data)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def next_order_sequence(self) -> int:
        seq = self.db.get(OrderNumberSequenceModel, 1)
        if seq is None:
            seq = OrderNumberSequenceModel(id=1, last_value=0)
            self.db.add(seq)
            self.db.flush()
        self.db.execute(
            update(OrderNumberSequenceModel)
            .where(OrderNumberSequenceModel.id == 1)
            .values(last_value=OrderNumberSequenceModel.last_value + 1)
        )
        self.db.refresh(seq)
        return seq.last_value
