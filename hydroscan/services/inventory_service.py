# hydroscan/services/inventory_service.py
from dataclasses import dataclass

from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.domain.enums import GallonShape, ProductCategory, WaterType
from hydroscan.domain.errors import PersistenceFailure, ValidationError
from hydroscan.domain.products import Uom
from hydroscan.repos.interfaces import InventoryRepository
from hydroscan.repos.inventory_repo import InventoryRepo
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)

MAX_WRITE_ATTEMPTS = 5

CONTAINER_KEYS = (
    "slim_gallon",
    "round_gallon",
    "small_cap_seal",
    "big_cap_seal",
    "faucet_seal",
    "umbrella_seal",
    "small_cap_cover",
    "big_cap_cover",
    "full_round_cover",
    "non_leak_cover",
)
REFILL_KEYS = ("mineral_20l", "alkaline_20l", "mineral_10l", "alkaline_10l")
DEFAULT_STOCK_KEYS = CONTAINER_KEYS + REFILL_KEYS


@dataclass(frozen=True)
class StockAdjustment:
    key: str
    previous: int
    quantity: int
    low_stock: bool = False


def resolve_stock_key(water_type, uom, category=ProductCategory.REFILL) -> str | None:
    """
    Stock key for a sold product, or None when the product is not tracked.

    Refills are tracked per water type and size; new gallons per container
    shape, whatever water (or none) they ship with. Accessories are untracked.
    """
    category = ProductCategory.parse(category)
    water_type = WaterType.parse(water_type)
    uom = Uom.parse(uom)

    if category.is_accessory or water_type is WaterType.ACCESSORY:
        return None
    if category is ProductCategory.NEW_GALLON:
        shape = uom.shape or GallonShape.SLIM
        return f"{shape.value.lower()}_gallon"
    if water_type is WaterType.NO_REFILL or uom.liters is None:
        return None
    return f"{water_type.value.lower()}_{uom.liters}l"


class InventoryService:
    def __init__(self, db: Session, repo: InventoryRepository | None = None):
        self.db = db
        self.repo = repo or InventoryRepo(db)

    def get_quantity(self, key: str) -> int:
        quantity = self.repo.current_quantity(key)
        return quantity or 0

    def list_stock(self) -> dict[str, int]:
        return {row.key: row.quantity_on_hand for row in self.repo.list_all()}

    def adjust_stock(self, key: str, delta: int) -> StockAdjustment:
        with transaction(self.db):
            return self.apply_delta(key, delta)

    def set_quantity(self, key: str, quantity: int) -> StockAdjustment:
        """Inventory-count correction; replaces the stored figure outright."""
        if quantity < 0:
            raise ValidationError("Quantity must not be negative")
        with transaction(self.db):
            previous, quantity = self._write(key, lambda current: quantity)
        logger.info(f"Inventory {key} set from {previous} to {quantity}")
        return StockAdjustment(key=key, previous=previous, quantity=quantity)

    def seed_defaults(self) -> None:
        with transaction(self.db):
            for key in DEFAULT_STOCK_KEYS:
                self.repo.get_or_create(key)

    # runs inside the caller's transaction
    def apply_delta(self, key: str, delta: int) -> StockAdjustment:
        previous, quantity = self._write(key, lambda current: max(current + delta, 0))
        low_stock = previous + delta < 0

        if low_stock:
            logger.warning(
                f"Low stock on {key}: requested {delta} with {previous} on hand, floored at 0"
            )
        else:
            logger.info(f"Inventory {key}: {previous} -> {quantity}")

        return StockAdjustment(key=key, previous=previous, quantity=quantity, low_stock=low_stock)

    def _write(self, key: str, compute) -> tuple[int, int]:
        """
        Compare-and-set loop: read the stored count, compute the new one and
        write it only if the count is still what was read.

        Returns (previous, new). A concurrent writer makes the UPDATE miss and
        the loop re-reads, so no sale is lost.
        """
        self.repo.get_or_create(key)
        for _ in range(MAX_WRITE_ATTEMPTS):
            current = self.repo.current_quantity(key)
            target = compute(current)
            if self.repo.compare_and_set(key, current, target) == 1:
                return current, target
            logger.info(f"Inventory {key} changed underneath us, retrying")
        raise PersistenceFailure(f"Inventory {key} kept changing; gave up after {MAX_WRITE_ATTEMPTS} attempts")
