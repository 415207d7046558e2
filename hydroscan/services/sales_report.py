# hydroscan/services/sales_report.py
"""
Sales rollups for a day, week, month or year around an anchor date.

Peaks pick the busiest bucket inside the window: the hour of the day, the
weekday of the week, the week of the month (1-4, days 29-31 fold into
week 4) or the month of the year.
"""
import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from hydroscan.data.models.order import OrderModel
from hydroscan.domain.enums import OrderStatus, ReportPeriod, WaterType
from hydroscan.domain.session import SessionContext
from hydroscan.repos.interfaces import OrderRepository
from hydroscan.repos.order_repo import OrderRepo
from hydroscan.services.daily_aggregator import order_units
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Peak:
    label: str
    value: int


@dataclass
class SalesReport:
    owner_id: str
    period: ReportPeriod
    start: date
    end: date
    total_revenue_centavos: int = 0
    total_quantity: int = 0
    total_uom: int = 0
    total_orders: int = 0
    most_ordered_water_type: WaterType | None = None
    top_customer: str | None = None
    unpaid_orders: int = 0
    unpaid_customers: list[str] = field(default_factory=list)
    peak_quantity: Peak | None = None
    peak_uom: Peak | None = None
    peak_revenue: Peak | None = None


def period_window(period: ReportPeriod, anchor: date) -> tuple[date, date]:
    """Inclusive first and last date of the period containing anchor. Weeks start on Sunday."""
    if period is ReportPeriod.DAY:
        return anchor, anchor
    if period is ReportPeriod.WEEK:
        start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    if period is ReportPeriod.MONTH:
        last = calendar.monthrange(anchor.year, anchor.month)[1]
        return anchor.replace(day=1), anchor.replace(day=last)
    return date(anchor.year, 1, 1), date(anchor.year, 12, 31)


def local_hour(created_at: datetime) -> int:
    # SQLite hands back naive UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone().hour


def hour_label(hour: int) -> str:
    return f"{hour % 12 or 12}{'am' if hour < 12 else 'pm'}"


def bucket_of(period: ReportPeriod, order: OrderModel) -> tuple[int, str]:
    """Sortable bucket key and its display label."""
    day = order.order_date
    if period is ReportPeriod.DAY:
        hour = local_hour(order.created_at)
        return hour, hour_label(hour)
    if period is ReportPeriod.WEEK:
        return (day.weekday() + 1) % 7, calendar.day_name[day.weekday()]
    if period is ReportPeriod.MONTH:
        week = min((day.day - 1) // 7 + 1, 4)
        return week, f"Week {week}"
    return day.month, calendar.month_name[day.month]


def peak_of(totals: dict) -> Peak | None:
    best = None
    for key in sorted(totals):
        label, value = totals[key]
        if best is None or value > best.value:
            best = Peak(label=label, value=value)
    return best


class SalesReportService:
    """Cancelled orders are left out, the same as in daily summaries."""

    def __init__(self, db: Session, order_repo: OrderRepository | None = None, clock=None):
        self.db = db
        self.order_repo = order_repo or OrderRepo(db)
        self.clock = clock or datetime.now

    def report(self, ctx: SessionContext, period: ReportPeriod, anchor: date | None = None) -> SalesReport:
        owner_id = ctx.require_user()
        period = ReportPeriod.parse(period)
        anchor = anchor or self.clock().date()
        start, end = period_window(period, anchor)
        orders = self.order_repo.orders_between(owner_id, start, end, exclude_status=OrderStatus.CANCELLED)

        report = SalesReport(owner_id=owner_id, period=period, start=start, end=end)
        by_water = defaultdict(int)
        by_customer = defaultdict(int)
        qty_buckets, uom_buckets, revenue_buckets = {}, {}, {}
        unpaid_customers = []

        for order in orders:
            key, label = bucket_of(period, order)
            quantity = sum(i.quantity for i in order.items)
            units = order_units(order)

            report.total_orders += 1
            report.total_revenue_centavos += order.total_amount_centavos
            report.total_quantity += quantity
            report.total_uom += units

            for bucket, value in (
                (qty_buckets, quantity),
                (uom_buckets, units),
                (revenue_buckets, order.total_amount_centavos),
            ):
                bucket[key] = (label, bucket.get(key, (label, 0))[1] + value)

            for item in order.items:
                if item.water_type in (WaterType.MINERAL, WaterType.ALKALINE):
                    by_water[item.water_type] += item.quantity
                by_customer[item.recipient_name] += item.quantity

            if not order.is_paid:
                report.unpaid_orders += 1
                unpaid_customers.extend(i.recipient_name for i in order.items)

        # max() keeps the first of equal counts, i.e. the earliest seen
        report.most_ordered_water_type = max(by_water, key=by_water.get) if by_water else None
        report.top_customer = max(by_customer, key=by_customer.get) if by_customer else None
        report.unpaid_customers = list(dict.fromkeys(unpaid_customers))
        report.peak_quantity = peak_of(qty_buckets)
        report.peak_uom = peak_of(uom_buckets)
        report.peak_revenue = peak_of(revenue_buckets)

        logger.info(
            f"Sales report for {owner_id}, {period} {start}..{end}: "
            f"{report.total_orders} orders, {report.total_revenue_centavos} centavos"
        )
        return report
