from datetime import date

import pytest

from hydroscan.domain.enums import OrderStatus, WaterType
from hydroscan.domain.errors import (
    IllegalStateTransition,
    NotFound,
    NotLoggedIn,
    ValidationError,
)
from hydroscan.domain.products import CartItemInput, ProductVariant
from hydroscan.domain.scheduling import Schedule
from hydroscan.domain.session import SessionContext
from hydroscan.services.order_service import (
    OrderService,
    can_transition,
    format_order_number,
)
from hydroscan.services.pricing_catalog import PricingCatalog

ALKALINE_20 = ProductVariant.refill("Alkaline", "20L")
MINERAL_10 = ProductVariant.refill("Mineral", "10L")


def fill_cart(cart, ctx):
    cart.add_item(ctx, CartItemInput(ALKALINE_20, 2))
    cart.add_item(ctx, CartItemInput(MINERAL_10, 1))


class ExplodingInventory:
    def apply_delta(self, key, delta):
        raise RuntimeError("inventory offline")


class TestSubmitOrder:
    def test_hydrocoin_scenario(self, cart, orders, ledger, ctx, notifier):
        fill_cart(cart, ctx)
        ledger.credit(ctx.user_id, 10)

        order = orders.submit_order(ctx, use_hydrocoins=True)

        assert order.total_amount_centavos == 10500
        assert order.coins_used == 10
        assert order.discount_centavos == 1000
        assert ledger.balance(ctx.user_id) == 0
        assert notifier.sent == [(ctx.user_id, "ORD-000001", "Pending")]

    def test_snapshot_of_cart(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        assert len(order.items) == 2
        assert order.total_item_count == 3
        assert order.status is OrderStatus.PROCESSING
        assert not order.is_paid
        assert order.order_date == date(2024, 6, 3)
        assert order.subtotal_centavos - order.discount_centavos == order.total_amount_centavos
        assert sum(i.quantity * i.unit_price_centavos for i in order.items) == 11500
        assert cart.list_items(ctx) == []

    def test_coins_ignored_unless_requested(self, cart, orders, ledger, ctx):
        fill_cart(cart, ctx)
        ledger.credit(ctx.user_id, 10)

        order = orders.submit_order(ctx)
        assert order.total_amount_centavos == 11500
        assert order.coins_used == 0
        assert ledger.balance(ctx.user_id) == 10

    def test_order_numbers_are_sequential(self, cart, orders, ctx):
        numbers = []
        for _ in range(3):
            cart.add_item(ctx, CartItemInput(MINERAL_10, 1))
            numbers.append(orders.submit_order(ctx).order_number)
        assert numbers == ["ORD-000001", "ORD-000002", "ORD-000003"]

    def test_inventory_decremented(self, cart, orders, inventory, ctx):
        inventory.set_quantity("alkaline_20l", 5)
        fill_cart(cart, ctx)

        orders.submit_order(ctx)
        assert inventory.get_quantity("alkaline_20l") == 3
        # mineral_10l had nothing on hand; floored rather than failing the order
        assert inventory.get_quantity("mineral_10l") == 0

    def test_accessories_leave_inventory_alone(self, cart, orders, inventory, ctx):
        cart.add_item(ctx, CartItemInput(ProductVariant.accessory("Big Cap Cover"), 2))
        orders.submit_order(ctx)
        assert inventory.list_stock() == {}

    def test_line_no_longer_priced(self, db, cart, ledger, inventory, notifier, clock, ctx):
        fill_cart(cart, ctx)
        # the price list changed after the items went into the cart
        svc = OrderService(
            db,
            catalog=PricingCatalog(refill_prices={}),
            ledger=ledger,
            inventory=inventory,
            notifier=notifier,
            clock=clock,
        )

        with pytest.raises(ValidationError, match="no longer sold"):
            svc.submit_order(ctx)

        assert svc.list_orders(ctx) == []
        assert len(cart.list_items(ctx)) == 2
        assert notifier.sent == []

    def test_empty_cart(self, orders, ctx):
        with pytest.raises(ValidationError, match="Cart is empty"):
            orders.submit_order(ctx)

    def test_not_logged_in(self, orders):
        with pytest.raises(NotLoggedIn):
            orders.submit_order(SessionContext())

    def test_failure_rolls_everything_back(self, db, cart, ledger, catalog, notifier, clock, ctx):
        fill_cart(cart, ctx)
        ledger.credit(ctx.user_id, 10)
        svc = OrderService(
            db,
            catalog=catalog,
            ledger=ledger,
            inventory=ExplodingInventory(),
            notifier=notifier,
            clock=clock,
        )

        with pytest.raises(RuntimeError):
            svc.submit_order(ctx, use_hydrocoins=True)

        assert svc.list_orders(ctx) == []
        assert len(cart.list_items(ctx)) == 2
        assert ledger.balance(ctx.user_id) == 10
        assert notifier.sent == []

    def test_notifier_failure_keeps_the_order(self, db, cart, catalog, clock, ctx):
        class BrokenNotifier:
            def send_order_notification(self, *args):
                raise ConnectionError("broker down")

        fill_cart(cart, ctx)
        svc = OrderService(db, catalog=catalog, notifier=BrokenNotifier(), clock=clock)
        order = svc.submit_order(ctx)
        assert svc.get_order(ctx, order.id).order_number == "ORD-000001"


class TestScheduling:
    def test_pickup_today_rejected(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        with pytest.raises(ValidationError):
            orders.submit_order(ctx, schedule=Schedule(pickup_date=date(2024, 6, 3)))

    def test_sunday_rejected(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        with pytest.raises(ValidationError):
            orders.submit_order(ctx, schedule=Schedule(delivery_date=date(2024, 6, 9)))

    def test_future_tuesday_accepted(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx, schedule=Schedule(pickup_date=date(2024, 6, 4)))
        assert order.is_scheduled
        assert order.pickup_date == date(2024, 6, 4)
        assert order.delivery_date is None


class TestTransitions:
    @pytest.mark.parametrize(
        "current,requested,allowed",
        [
            (OrderStatus.PROCESSING, OrderStatus.DELIVERED, True),
            (OrderStatus.PROCESSING, OrderStatus.CANCELLED, True),
            (OrderStatus.DELIVERED, OrderStatus.PROCESSING, True),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED, False),
            (OrderStatus.PROCESSING, OrderStatus.PROCESSING, False),
            (OrderStatus.CANCELLED, OrderStatus.PROCESSING, False),
            (OrderStatus.CANCELLED, OrderStatus.DELIVERED, False),
        ],
    )
    def test_can_transition(self, current, requested, allowed):
        assert can_transition(current, requested) is allowed

    def test_deliver_and_reopen(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        delivered = orders.mark_delivered(ctx, order.id)
        assert delivered.status is OrderStatus.DELIVERED
        assert delivered.delivered_at is not None

        reopened = orders.mark_pending(ctx, order.id)
        assert reopened.status is OrderStatus.PROCESSING
        assert reopened.delivered_at is None

    def test_cancel_is_terminal(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        assert orders.cancel_order(ctx, order.id) is True
        assert orders.cancel_order(ctx, order.id) is False
        with pytest.raises(IllegalStateTransition):
            orders.change_status(ctx, order.id, "Delivered")
        assert orders.get_order(ctx, order.id).status is OrderStatus.CANCELLED

    def test_cancel_does_not_restore_stock(self, cart, orders, inventory, ctx):
        inventory.set_quantity("alkaline_20l", 5)
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        orders.cancel_order(ctx, order.id)
        assert inventory.get_quantity("alkaline_20l") == 3

    def test_delivered_cannot_be_cancelled(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)
        orders.mark_delivered(ctx, order.id)
        assert orders.cancel_order(ctx, order.id) is False

    def test_unknown_status(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)
        with pytest.raises(ValidationError):
            orders.change_status(ctx, order.id, "Shipped")

    def test_payment(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        assert orders.change_payment(ctx, order.id, True).is_paid
        assert not orders.change_payment(ctx, order.id, False).is_paid

        orders.cancel_order(ctx, order.id)
        with pytest.raises(IllegalStateTransition):
            orders.change_payment(ctx, order.id, True)

    def test_mark_paid_and_delivered(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)

        done = orders.mark_paid_and_delivered(ctx, order.id)
        assert done.is_paid
        assert done.status is OrderStatus.DELIVERED

    def test_orders_are_owner_scoped(self, cart, orders, ctx):
        fill_cart(cart, ctx)
        order = orders.submit_order(ctx)
        intruder = SessionContext("user-2")

        with pytest.raises(NotFound):
            orders.get_order(intruder, order.id)
        with pytest.raises(NotFound):
            orders.mark_delivered(intruder, order.id)
        assert orders.list_orders(intruder) == []


class TestQueries:
    def test_list_by_status(self, cart, orders, ctx):
        for _ in range(2):
            fill_cart(cart, ctx)
            orders.submit_order(ctx)
        first = orders.list_orders(ctx)[-1]
        orders.cancel_order(ctx, first.id)

        assert len(orders.list_orders(ctx)) == 2
        assert [o.id for o in orders.list_orders(ctx, OrderStatus.CANCELLED)] == [first.id]
        assert len(orders.list_orders(ctx, OrderStatus.PROCESSING)) == 1

    def test_orders_for_date(self, cart, orders, clock, ctx):
        fill_cart(cart, ctx)
        orders.submit_order(ctx)

        assert len(orders.orders_for_date(ctx, date(2024, 6, 3))) == 1
        assert orders.orders_for_date(ctx, date(2024, 6, 4)) == []

    def test_orders_between_rejects_reversed_range(self, orders, ctx):
        with pytest.raises(ValidationError):
            orders.orders_between(ctx, date(2024, 6, 4), date(2024, 6, 3))


class TestScannedOrder:
    def test_record_from_label(self, orders, inventory, ctx):
        inventory.set_quantity("alkaline_20l", 4)

        order = orders.record_scanned_order(ctx, "name=Juan;address=Purok 1;unit=20L Slim;type=A", quantity=2)

        assert order.is_paid
        assert order.total_amount_centavos == 10000
        [item] = order.items
        assert item.product_name == "Refill Alkaline 20L (Slim)"
        assert item.recipient_name == "Juan"
        assert item.recipient_address == "Purok 1"
        assert inventory.get_quantity("alkaline_20l") == 2

    def test_counter_water_type_wins(self, orders, ctx):
        order = orders.record_scanned_order(ctx, "name=Juan;unit=20L;type=A", water_type="M")
        assert order.items[0].water_type is WaterType.MINERAL
        assert order.total_amount_centavos == 3000

    def test_label_without_type_is_mineral(self, orders, ctx):
        order = orders.record_scanned_order(ctx, "name=Juan;unit=10L")
        assert order.items[0].water_type is WaterType.MINERAL
        assert order.total_amount_centavos == 1500

    def test_unpriced_unit_rejected(self, orders, inventory, ctx):
        with pytest.raises(ValidationError, match="not sold"):
            orders.record_scanned_order(ctx, "name=Ana;unit=5L;type=M")

        assert orders.list_orders(ctx) == []
        assert inventory.list_stock() == {}

    @pytest.mark.parametrize("raw", ["unit=20L", "name=Juan", "name=Juan;unit=lots", ""])
    def test_incomplete_label(self, orders, ctx, raw):
        with pytest.raises(ValidationError):
            orders.record_scanned_order(ctx, raw)


def test_format_order_number():
    assert format_order_number(1) == "ORD-000001"
    assert format_order_number(1234567) == "ORD-1234567"
