# hydroscan/domain/schemas.py
from datetime import date, datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from hydroscan.domain.enums import GallonShape, OrderStatus, ProductCategory, ReportPeriod, WaterType
from hydroscan.domain.money import to_decimal
from hydroscan.domain.products import SELF_RECIPIENT, CartItemInput, ProductVariant


class UserCreate(BaseModel):
    """Schema for registering a user."""

    id: str = Field(..., min_length=1, max_length=64, description="User id issued by the session provider")
    full_name: str = Field(..., min_length=1, max_length=200)
    address: str | None = Field(None, max_length=300)
    phone_number: str | None = Field(None, max_length=32)


class UserRead(BaseModel):
    id: str
    full_name: str
    address: str | None = None
    phone_number: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CartItemIn(BaseModel):
    """
    Schema for adding a product to the cart.

    uom is required for refills ("20L", "10L", optionally "20L Slim");
    shape picks the container of a new gallon; accessories need neither.
    """

    category: ProductCategory
    water_type: WaterType = WaterType.MINERAL
    uom: str | None = None
    shape: GallonShape | None = None
    quantity: int = Field(..., description="Quantity (must be >= 1)")
    recipient_name: str = SELF_RECIPIENT
    recipient_address: str = SELF_RECIPIENT

    def to_input(self) -> CartItemInput:
        if self.category is ProductCategory.REFILL:
            variant = ProductVariant.refill(self.water_type, self.uom)
        elif self.category is ProductCategory.NEW_GALLON:
            variant = ProductVariant.new_gallon(self.water_type, self.shape or GallonShape.SLIM)
        else:
            variant = ProductVariant.accessory(self.category)
        return CartItemInput(
            variant=variant,
            quantity=self.quantity,
            recipient_name=self.recipient_name,
            recipient_address=self.recipient_address,
        )


class QuantityIn(BaseModel):
    quantity: int


class CartItemOut(BaseModel):
    id: int
    product_name: str
    category: ProductCategory
    water_type: WaterType
    uom: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    recipient_name: str
    recipient_address: str
    added_at: datetime

    @classmethod
    def from_model(cls, item) -> "CartItemOut":
        return cls(
            id=item.id,
            product_name=item.product_name,
            category=item.category,
            water_type=item.water_type,
            uom=item.uom,
            quantity=item.quantity,
            unit_price=to_decimal(item.unit_price_centavos),
            line_total=to_decimal(item.line_total_centavos),
            recipient_name=item.recipient_name,
            recipient_address=item.recipient_address,
            added_at=item.added_at,
        )


class CartOut(BaseModel):
    """Schema for the whole cart (response)."""

    owner_id: str
    items: List[CartItemOut]
    total: Decimal


class DiscountOut(BaseModel):
    total: Decimal
    discounted_total: Decimal
    coins_consumed: int
    balance: int


class OrderSubmitIn(BaseModel):
    """Schema for checking out the cart."""

    pickup_date: date | None = None
    delivery_date: date | None = None
    use_hydrocoins: bool = False


class OrderItemOut(BaseModel):
    product_name: str
    category: ProductCategory
    water_type: WaterType
    uom: str
    quantity: int
    unit_price: Decimal
    recipient_name: str
    recipient_address: str


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    owner_id: str
    order_number: str
    order_date: date
    created_at: datetime
    status: OrderStatus
    status_label: str
    is_paid: bool
    total_amount: Decimal
    discount: Decimal
    coins_used: int
    total_item_count: int
    is_scheduled: bool
    pickup_date: date | None = None
    delivery_date: date | None = None
    delivered_at: datetime | None = None
    items: List[OrderItemOut]

    @classmethod
    def from_model(cls, order) -> "OrderOut":
        return cls(
            id=order.id,
            owner_id=order.owner_id,
            order_number=order.order_number,
            order_date=order.order_date,
            created_at=order.created_at,
            status=order.status,
            status_label=order.status.label,
            is_paid=order.is_paid,
            total_amount=to_decimal(order.total_amount_centavos),
            discount=to_decimal(order.discount_centavos),
            coins_used=order.coins_used,
            total_item_count=order.total_item_count,
            is_scheduled=order.is_scheduled,
            pickup_date=order.pickup_date,
            delivery_date=order.delivery_date,
            delivered_at=order.delivered_at,
            items=[
                OrderItemOut(
                    product_name=i.product_name,
                    category=i.category,
                    water_type=i.water_type,
                    uom=i.uom,
                    quantity=i.quantity,
                    unit_price=to_decimal(i.unit_price_centavos),
                    recipient_name=i.recipient_name,
                    recipient_address=i.recipient_address,
                )
                for i in order.items
            ],
        )


class StatusIn(BaseModel):
    status: str


class PaymentIn(BaseModel):
    is_paid: bool


class ScanOrderIn(BaseModel):
    """Walk-in order recorded from a scanned label."""

    payload: str = Field(..., min_length=1)
    water_type: str | None = None
    quantity: int = 1
    is_paid: bool = True


class ScanPreviewIn(BaseModel):
    payload: str


class ScanPreviewOut(BaseModel):
    name: str | None = None
    address: str | None = None
    unit: str | None = None
    water_type: WaterType | None = None


class PayloadIn(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)
    water_type: WaterType | None = None


class PayloadOut(BaseModel):
    payload: str


class StockOut(BaseModel):
    key: str
    quantity: int


class StockDeltaIn(BaseModel):
    delta: int


class StockSetIn(BaseModel):
    quantity: int


class StockAdjustmentOut(BaseModel):
    key: str
    previous: int
    quantity: int
    low_stock: bool

    model_config = ConfigDict(from_attributes=True)


class BalanceOut(BaseModel):
    owner_id: str
    balance: int


class CoinAmountIn(BaseModel):
    amount: int


class DebitOut(BaseModel):
    success: bool
    balance: int


class DailySummaryOut(BaseModel):
    owner_id: str
    date: date
    display_date: str
    total_units: int
    total_revenue: Decimal
    total_orders: int
    source_orders: List[str]

    @classmethod
    def from_summary(cls, summary) -> "DailySummaryOut":
        return cls(
            owner_id=summary.owner_id,
            date=summary.date,
            display_date=summary.display_date,
            total_units=summary.total_units,
            total_revenue=to_decimal(summary.total_revenue_centavos),
            total_orders=summary.total_orders,
            source_orders=list(summary.source_orders),
        )


class PeakOut(BaseModel):
    label: str
    value: int


class RevenuePeakOut(BaseModel):
    label: str
    amount: Decimal


class SalesReportOut(BaseModel):
    """Period rollup; peaks are null when the window has no orders."""

    owner_id: str
    period: ReportPeriod
    start: date
    end: date
    total_revenue: Decimal
    total_quantity: int
    total_uom: int
    total_orders: int
    most_ordered_water_type: WaterType | None = None
    top_customer: str | None = None
    unpaid_orders: int
    unpaid_customers: List[str]
    peak_quantity: PeakOut | None = None
    peak_uom: PeakOut | None = None
    peak_revenue: RevenuePeakOut | None = None

    @classmethod
    def from_report(cls, report) -> "SalesReportOut":
        def peak(p):
            return PeakOut(label=p.label, value=p.value) if p else None

        return cls(
            owner_id=report.owner_id,
            period=report.period,
            start=report.start,
            end=report.end,
            total_revenue=to_decimal(report.total_revenue_centavos),
            total_quantity=report.total_quantity,
            total_uom=report.total_uom,
            total_orders=report.total_orders,
            most_ordered_water_type=report.most_ordered_water_type,
            top_customer=report.top_customer,
            unpaid_orders=report.unpaid_orders,
            unpaid_customers=list(report.unpaid_customers),
            peak_quantity=peak(report.peak_quantity),
            peak_uom=peak(report.peak_uom),
            peak_revenue=(
                RevenuePeakOut(label=report.peak_revenue.label, amount=to_decimal(report.peak_revenue.value))
                if report.peak_revenue
                else None
            ),
        )


class RolloverIn(BaseModel):
    today: date | None = None
