# hydroscan/services/order_service.py
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.data.models.order import OrderItemModel, OrderModel
from hydroscan.domain.enums import OrderStatus, WaterType
from hydroscan.domain.errors import IllegalStateTransition, NotFound, ValidationError
from hydroscan.domain.payload import ScannedPayload
from hydroscan.domain.products import ProductVariant, Uom
from hydroscan.domain.scheduling import BLOCKED_WEEKDAYS, Schedule, validate_schedule
from hydroscan.domain.session import SessionContext
from hydroscan.repos.cart_repo import CartRepo
from hydroscan.repos.interfaces import CartRepository, OrderRepository
from hydroscan.repos.order_repo import OrderRepo
from hydroscan.services.cart_service import apply_hydrocoin_discount
from hydroscan.services.hydrocoin_ledger import HydroCoinLedger
from hydroscan.services.inventory_service import InventoryService, StockAdjustment, resolve_stock_key
from hydroscan.services.notification_service import NotificationService
from hydroscan.services.pricing_catalog import PricingCatalog
from hydroscan.utils.settings import ORDER_NUMBER_PREFIX
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_TRANSITIONS = {
    OrderStatus.PROCESSING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class _Line:
    variant: ProductVariant
    product_name: str
    quantity: int
    unit_price_centavos: int
    recipient_name: str
    recipient_address: str


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def format_order_number(sequence: int, prefix: str = ORDER_NUMBER_PREFIX) -> str:
    return f"{prefix}-{sequence:06d}"


class OrderService:
    """
    Order lifecycle: cart snapshot into an order, status and payment changes.

    Order creation, cart clearing, the HydroCoin debit and the inventory
    decrement commit together or not at all. Cancelling does not put stock
    back: the gallons are treated as already consumed once the order exists.
    """

    def __init__(
        self,
        db: Session,
        catalog: PricingCatalog | None = None,
        ledger: HydroCoinLedger | None = None,
        inventory: InventoryService | None = None,
        notifier: NotificationService | None = None,
        repo: OrderRepository | None = None,
        cart_repo: CartRepository | None = None,
        clock=None,
        blocked_weekdays: frozenset[int] = BLOCKED_WEEKDAYS,
    ):
        self.db = db
        self.repo = repo or OrderRepo(db)
        self.cart_repo = cart_repo or CartRepo(db)
        self.catalog = catalog or PricingCatalog()
        self.ledger = ledger or HydroCoinLedger(db)
        self.inventory = inventory or InventoryService(db)
        self.notifier = notifier or NotificationService()
        self.clock = clock or datetime.now
        self.blocked_weekdays = blocked_weekdays

    def today(self) -> date:
        return self.clock().date()

    #query
    def get_order(self, ctx: SessionContext, order_id: int) -> OrderModel:
        owner_id = ctx.require_user()
        return self._owned_order(owner_id, order_id)

    def list_orders(self, ctx: SessionContext, status: OrderStatus | None = None) -> list[OrderModel]:
        owner_id = ctx.require_user()
        return self.repo.list_orders(owner_id, status)

    def orders_between(self, ctx: SessionContext, start: date, end: date) -> list[OrderModel]:
        owner_id = ctx.require_user()
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self.repo.orders_between(owner_id, start, end)

    def orders_for_date(self, ctx: SessionContext, day: date) -> list[OrderModel]:
        return self.orders_between(ctx, day, day)

    #commands
    def submit_order(
        self,
        ctx: SessionContext,
        schedule: Schedule | None = None,
        use_hydrocoins: bool = False,
    ) -> OrderModel:
        owner_id = ctx.require_user()
        schedule = validate_schedule(schedule, self.today(), self.blocked_weekdays)

        cart_items = self.cart_repo.get_items(owner_id)
        if not cart_items:
            raise ValidationError("Cart is empty")

        lines = []
        for item in cart_items:
            variant = item.variant
            quote = self.catalog.price_variant(variant)
            if not quote.priced:
                raise ValidationError(f"{item.product_name} is no longer sold; remove it from the cart")
            lines.append(
                _Line(
                    variant=variant,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_centavos=quote.centavos,
                    recipient_name=item.recipient_name,
                    recipient_address=item.recipient_address,
                )
            )

        with transaction(self.db):
            balance = self.ledger.balance(owner_id) if use_hydrocoins else 0
            order, adjustments = self._persist_order(
                owner_id, lines, schedule=schedule, coin_balance=balance, is_paid=False
            )
            self.cart_repo.clear(owner_id)

        self._report_low_stock(order, adjustments)
        logger.info(
            f"Order {order.order_number} submitted by user {owner_id}: "
            f"{order.total_item_count} items, {order.total_amount_centavos} centavos, "
            f"{order.coins_used} coins used"
        )
        self._notify(order)
        return order

    def record_scanned_order(
        self,
        ctx: SessionContext,
        raw_payload: str,
        water_type=None,
        quantity: int = 1,
        is_paid: bool = True,
    ) -> OrderModel:
        """
        Walk-in refill recorded from a scanned customer label.

        The water type chosen at the counter wins over the one printed on
        the label; Mineral when neither is given.
        """
        owner_id = ctx.require_user()
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        payload = ScannedPayload.from_raw(raw_payload)
        if not payload.name:
            raise ValidationError("Scanned label has no customer name")
        if payload.unit is None:
            raise ValidationError("Scanned label has no unit")

        if water_type is not None:
            water_type = WaterType.from_code(water_type)
        else:
            water_type = payload.water_type or WaterType.MINERAL

        uom = payload.unit
        if uom.liters is None:
            #labels carrying only a shape are 20L containers
            uom = Uom(liters=20, shape=uom.shape)

        variant = ProductVariant.refill(water_type, uom)
        quote = self.catalog.price_variant(variant)
        product_name = self.catalog.product_name(variant)
        if not quote.priced:
            raise ValidationError(f"{product_name} is not sold (no price)")
        line = _Line(
            variant=variant,
            product_name=product_name,
            quantity=quantity,
            unit_price_centavos=quote.centavos,
            recipient_name=payload.name,
            recipient_address=payload.address or "",
        )

        with transaction(self.db):
            order, adjustments = self._persist_order(owner_id, [line], is_paid=is_paid)

        self._report_low_stock(order, adjustments)
        logger.info(f"Walk-in order {order.order_number} recorded for {payload.name}")
        return order

    def change_status(self, ctx: SessionContext, order_id: int, new_status) -> OrderModel:
        owner_id = ctx.require_user()
        new_status = OrderStatus.parse(new_status)

        with transaction(self.db):
            order = self._owned_order(owner_id, order_id)
            self._transition(order, new_status)

        logger.info(f"Order {order.order_number} status -> {order.status}")
        return order

    def mark_delivered(self, ctx: SessionContext, order_id: int) -> OrderModel:
        return self.change_status(ctx, order_id, OrderStatus.DELIVERED)

    def mark_pending(self, ctx: SessionContext, order_id: int) -> OrderModel:
        return self.change_status(ctx, order_id, OrderStatus.PROCESSING)

    def cancel_order(self, ctx: SessionContext, order_id: int) -> bool:
        try:
            self.change_status(ctx, order_id, OrderStatus.CANCELLED)
        except IllegalStateTransition as e:
            logger.info(f"Cancel rejected for order {order_id}: {e}")
            return False
        return True

    def change_payment(self, ctx: SessionContext, order_id: int, is_paid: bool) -> OrderModel:
        owner_id = ctx.require_user()

        with transaction(self.db):
            order = self._owned_order(owner_id, order_id)
            if order.status is OrderStatus.CANCELLED:
                raise IllegalStateTransition(order.status, "Paid" if is_paid else "Unpaid")
            order.is_paid = bool(is_paid)
            self.db.flush()

        logger.info(f"Order {order.order_number} paid={order.is_paid}")
        return order

    def mark_paid_and_delivered(self, ctx: SessionContext, order_id: int) -> OrderModel:
        owner_id = ctx.require_user()

        with transaction(self.db):
            order = self._owned_order(owner_id, order_id)
            if order.status is not OrderStatus.DELIVERED:
                self._transition(order, OrderStatus.DELIVERED)
            order.is_paid = True
            self.db.flush()

        logger.info(f"Order {order.order_number} paid and delivered")
        return order

    #internals
    def _owned_order(self, owner_id: str, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order or order.owner_id != owner_id:
            raise NotFound(f"Order {order_id} not found")
        return order

    def _transition(self, order: OrderModel, new_status: OrderStatus) -> None:
        current = order.status
        if not can_transition(current, new_status):
            raise IllegalStateTransition(current, new_status)

        delivered_at = self.clock().astimezone(timezone.utc) if new_status is OrderStatus.DELIVERED else None
        rowcount = self.repo.update_status(
            order.id,
            current,
            {"status": new_status, "delivered_at": delivered_at},
        )
        #status moved underneath us
        if rowcount == 0:
            self.db.refresh(order)
            raise IllegalStateTransition(order.status, new_status)
        self.db.refresh(order)

    def _persist_order(
        self,
        owner_id: str,
        lines: list[_Line],
        schedule: Schedule | None = None,
        coin_balance: int = 0,
        is_paid: bool = False,
    ) -> tuple[OrderModel, list[StockAdjustment]]:
        schedule = schedule or Schedule()
        subtotal = sum(line.unit_price_centavos * line.quantity for line in lines)
        total, coins = apply_hydrocoin_discount(subtotal, coin_balance)

        now = self.clock()
        order = OrderModel(
            owner_id=owner_id,
            order_number=format_order_number(self.repo.next_order_sequence()),
            order_date=now.date(),
            created_at=now.astimezone(timezone.utc),
            status=OrderStatus.PROCESSING,
            is_paid=is_paid,
            total_amount_centavos=total,
            discount_centavos=subtotal - total,
            coins_used=coins,
            total_item_count=sum(line.quantity for line in lines),
            is_scheduled=schedule.is_scheduled,
            pickup_date=schedule.pickup_date,
            delivery_date=schedule.delivery_date,
            items=[
                OrderItemModel(
                    product_name=line.product_name,
                    category=line.variant.category,
                    water_type=line.variant.water_type,
                    uom=line.variant.uom.label,
                    quantity=line.quantity,
                    unit_price_centavos=line.unit_price_centavos,
                    recipient_name=line.recipient_name,
                    recipient_address=line.recipient_address,
                )
                for line in lines
            ],
        )
        self.repo.create_order(order)

        if coins:
            self.ledger.apply_debit(owner_id, coins)

        adjustments = []
        for line in lines:
            key = resolve_stock_key(line.variant.water_type, line.variant.uom, line.variant.category)
            if key is None:
                continue
            adjustments.append(self.inventory.apply_delta(key, -line.quantity))

        return order, adjustments

    def _report_low_stock(self, order: OrderModel, adjustments: list[StockAdjustment]) -> None:
        for adj in adjustments:
            if adj.low_stock:
                logger.warning(f"Order {order.order_number} drained {adj.key}; stock floored at 0")

    def _notify(self, order: OrderModel) -> None:
        try:
            self.notifier.send_order_notification(order.owner_id, order.order_number, order.status.label)
        except Exception as e:
            # the order is already committed; a lost notification must not undo it
            logger.warning(f"Failed to queue notification for order {order.order_number}: {e}")
