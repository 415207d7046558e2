#import all models so SQLAlchemy registers them in Base.metadata

from hydroscan.data.models.user import UserModel
from hydroscan.data.models.cart_item import CartItemModel
from hydroscan.data.models.order import OrderModel, OrderItemModel, OrderNumberSequenceModel
from hydroscan.data.models.inventory import InventoryModel
from hydroscan.data.models.hydrocoin import HydroCoinBalanceModel
from hydroscan.data.models.daily_summary import DailySummaryModel, RolloverStateModel

__all__ = [
    "UserModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "OrderNumberSequenceModel",
    "InventoryModel",
    "HydroCoinBalanceModel",
    "DailySummaryModel",
    "RolloverStateModel",
]
