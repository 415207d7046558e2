# hydroscan/services/cart_service.py
from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.data.models.cart_item import CartItemModel
from hydroscan.domain.errors import NotFound, ValidationError
from hydroscan.domain.money import CENTAVOS_PER_PESO
from hydroscan.domain.products import CartItemInput
from hydroscan.domain.session import SessionContext
from hydroscan.repos.cart_repo import CartRepo
from hydroscan.repos.interfaces import CartRepository
from hydroscan.services.pricing_catalog import PricingCatalog
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


def apply_hydrocoin_discount(total_centavos: int, available_balance: int) -> tuple[int, int]:
    """
    Offsets a total with HydroCoins, one coin per whole peso.

    Returns (discounted total in centavos, coins consumed). Coins never
    exceed the balance nor the whole pesos of the total, so the result is
    never negative.
    """
    if total_centavos <= 0 or available_balance <= 0:
        return max(total_centavos, 0), 0
    coins = min(available_balance, total_centavos // CENTAVOS_PER_PESO)
    return total_centavos - coins * CENTAVOS_PER_PESO, coins


class CartService:
    """
    Pending line items per user.
    commands (add, update, remove, clear) change state inside one transaction,
    queries (list, total) only read
    """

    def __init__(
        self,
        db: Session,
        catalog: PricingCatalog | None = None,
        repo: CartRepository | None = None,
    ):
        self.db = db
        self.repo = repo or CartRepo(db)
        self.catalog = catalog or PricingCatalog()

    #query
    def list_items(self, ctx: SessionContext) -> list[CartItemModel]:
        owner_id = ctx.require_user()
        return self.repo.get_items(owner_id)

    def compute_total(self, ctx: SessionContext) -> int:
        return sum((i.line_total_centavos for i in self.list_items(ctx)), 0)

    #commands
    def add_item(self, ctx: SessionContext, item: CartItemInput) -> CartItemModel:
        owner_id = ctx.require_user()

        if item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        recipient_name = (item.recipient_name or "").strip()
        recipient_address = (item.recipient_address or "").strip()
        if not recipient_name:
            raise ValidationError("Recipient name is required")

        quote = self.catalog.price_variant(item.variant)
        product_name = self.catalog.product_name(item.variant)
        if not quote.priced:
            raise ValidationError(f"{product_name} is not sold (no price)")

        with transaction(self.db):
            existing = self.repo.find_mergeable(
                owner_id, product_name, item.variant.water_type, recipient_name
            )

            if existing:
                logger.info(
                    f"{product_name} already in cart of user {owner_id}, quantity "
                    f"{existing.quantity} -> {existing.quantity + item.quantity}"
                )
                existing.quantity += item.quantity
                existing.unit_price_centavos = quote.centavos
                row = self.repo.add_item(existing)
            else:
                logger.info(f"Adding {item.quantity} x {product_name} to cart of user {owner_id}")
                row = self.repo.add_item(
                    CartItemModel(
                        owner_id=owner_id,
                        product_name=product_name,
                        category=item.variant.category,
                        water_type=item.variant.water_type,
                        uom=item.variant.uom.label,
                        quantity=item.quantity,
                        unit_price_centavos=quote.centavos,
                        recipient_name=recipient_name,
                        recipient_address=recipient_address or recipient_name,
                    )
                )

        return row

    def update_quantity(self, ctx: SessionContext, item_id: int, new_quantity: int) -> CartItemModel:
        owner_id = ctx.require_user()
        if new_quantity < 1:
            raise ValidationError("Invalid quantity: use remove for zero")

        with transaction(self.db):
            item = self._owned_item(owner_id, item_id)
            item.quantity = new_quantity
            self.repo.add_item(item)

        logger.info(f"Cart item {item_id} quantity set to {new_quantity}")
        return item

    def remove_item(self, ctx: SessionContext, item_id: int) -> None:
        owner_id = ctx.require_user()
        with transaction(self.db):
            item = self._owned_item(owner_id, item_id)
            self.repo.delete_item(item)
        logger.info(f"Cart item {item_id} removed for user {owner_id}")

    def clear(self, ctx: SessionContext) -> int:
        owner_id = ctx.require_user()
        with transaction(self.db):
            removed = self.repo.clear(owner_id)
        return removed

    def _owned_item(self, owner_id: str, item_id: int) -> CartItemModel:
        item = self.repo.get_item(item_id)
        #someone else's row reads as missing
        if not item or item.owner_id != owner_id:
            raise NotFound(f"Cart item {item_id} not found")
        return item
