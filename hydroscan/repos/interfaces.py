# hydroscan/repos/interfaces.py
"""
Structural interfaces the services depend on.

The SQLAlchemy repos in this package satisfy them; tests may hand a
service any object with the same methods instead.
"""
from datetime import date
from typing import Protocol

from hydroscan.data.models.cart_item import CartItemModel
from hydroscan.data.models.daily_summary import DailySummaryModel
from hydroscan.data.models.hydrocoin import HydroCoinBalanceModel
from hydroscan.data.models.inventory import InventoryModel
from hydroscan.data.models.order import OrderModel
from hydroscan.domain.enums import OrderStatus, WaterType


class CartRepository(Protocol):
    def get_item(self, item_id: int) -> CartItemModel | None: ...
    def get_items(self, owner_id: str) -> list[CartItemModel]: ...
    def find_mergeable(
        self, owner_id: str, product_name: str, water_type: WaterType, recipient_name: str
    ) -> CartItemModel | None: ...
    def add_item(self, item: CartItemModel) -> CartItemModel: ...
    def delete_item(self, item: CartItemModel) -> None: ...
    def clear(self, owner_id: str) -> int: ...


class OrderRepository(Protocol):
    def create_order(self, order: OrderModel) -> OrderModel: ...
    def get_order(self, order_id: int) -> OrderModel | None: ...
    def list_orders(self, owner_id: str, status: OrderStatus | None = None) -> list[OrderModel]: ...
    def orders_between(
        self, owner_id: str, start: date, end: date, exclude_status: OrderStatus | None = None
    ) -> list[OrderModel]: ...
    def order_dates(self, owner_id: str) -> list[date]: ...
    def update_status(self, order_id: int, old_status: OrderStatus, new_data: dict) -> int: ...
    def next_order_sequence(self) -> int: ...


class InventoryRepository(Protocol):
    def get(self, key: str) -> InventoryModel | None: ...
    def get_or_create(self, key: str) -> InventoryModel: ...
    def list_all(self) -> list[InventoryModel]: ...
    def current_quantity(self, key: str) -> int | None: ...
    def compare_and_set(self, key: str, expected: int, quantity: int) -> int: ...


class SummaryRepository(Protocol):
    def get(self, owner_id: str, day: date) -> DailySummaryModel | None: ...
    def exists(self, owner_id: str, day: date) -> bool: ...
    def list_for_owner(self, owner_id: str) -> list[DailySummaryModel]: ...
    def add(self, row: DailySummaryModel) -> DailySummaryModel: ...
    def delete(self, row: DailySummaryModel) -> None: ...
    def get_last_processed(self, owner_id: str) -> date | None: ...
    def set_last_processed(self, owner_id: str, day: date) -> None: ...


class LedgerRepository(Protocol):
    def get_account(self, owner_id: str) -> HydroCoinBalanceModel | None: ...
    def get_or_create(self, owner_id: str) -> HydroCoinBalanceModel: ...
    def debit_if_covered(self, owner_id: str, amount: int) -> int: ...
    def credit(self, owner_id: str, amount: int) -> HydroCoinBalanceModel: ...
