# hydroscan/services/daily_aggregator.py
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hydroscan.data.database import transaction
from hydroscan.data.models.daily_summary import DailySummaryModel
from hydroscan.data.models.order import OrderModel
from hydroscan.domain.enums import OrderStatus
from hydroscan.domain.errors import PersistenceFailure
from hydroscan.domain.products import Uom
from hydroscan.domain.session import SessionContext
from hydroscan.repos.interfaces import OrderRepository, SummaryRepository
from hydroscan.repos.order_repo import OrderRepo
from hydroscan.repos.summary_repo import SummaryRepo
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)

DISPLAY_DATE_FORMAT = "%b %d, %Y"


@dataclass
class DailySummary:
    owner_id: str
    date: date
    display_date: str
    total_units: int
    total_revenue_centavos: int
    total_orders: int
    source_orders: list[str] = field(default_factory=list)

    @classmethod
    def from_model(cls, row: DailySummaryModel) -> "DailySummary":
        return cls(
            owner_id=row.owner_id,
            date=row.date,
            display_date=row.display_date,
            total_units=row.total_units,
            total_revenue_centavos=row.total_revenue_centavos,
            total_orders=row.total_orders,
            source_orders=list(row.source_orders or []),
        )


def order_units(order: OrderModel) -> int:
    # liters x quantity: two 20L refills count 40
    return sum(Uom.parse(i.uom).numeric_value * i.quantity for i in order.items)


def build_summary(owner_id: str, day: date, orders: list[OrderModel]) -> DailySummary:
    return DailySummary(
        owner_id=owner_id,
        date=day,
        display_date=day.strftime(DISPLAY_DATE_FORMAT),
        total_units=sum(order_units(o) for o in orders),
        total_revenue_centavos=sum(o.total_amount_centavos for o in orders),
        total_orders=len(orders),
        source_orders=[o.order_number for o in orders],
    )


class DailyAggregator:
    """
    Folds a day's orders into a DailySummary and stores it at most once.

    Cancelled orders are left out; everything else on that calendar date
    (pending or delivered) counts.
    """

    def __init__(
        self,
        db: Session,
        repo: SummaryRepository | None = None,
        order_repo: OrderRepository | None = None,
        clock=None,
    ):
        self.db = db
        self.repo = repo or SummaryRepo(db)
        self.order_repo = order_repo or OrderRepo(db)
        self.clock = clock or datetime.now

    #query
    def summarize(self, ctx: SessionContext, day: date) -> DailySummary | None:
        owner_id = ctx.require_user()
        return self._summarize(owner_id, day)

    def get_summary(self, ctx: SessionContext, day: date) -> DailySummary | None:
        owner_id = ctx.require_user()
        row = self.repo.get(owner_id, day)
        return DailySummary.from_model(row) if row else None

    def list_summaries(self, ctx: SessionContext) -> list[DailySummary]:
        owner_id = ctx.require_user()
        return [DailySummary.from_model(r) for r in self.repo.list_for_owner(owner_id)]

    #commands
    def persist_if_absent(self, summary: DailySummary, force: bool = False) -> bool:
        """
        Stores the summary unless one already exists for (owner, date).

        Returns True when a row was written. The unique constraint on
        (owner_id, date) settles races between concurrent callers; the loser
        sees an IntegrityError and the call becomes a no-op.
        """
        existing = self.repo.get(summary.owner_id, summary.date)
        if existing and not force:
            logger.info(f"Daily summary already exists for {summary.owner_id} on {summary.date}")
            return False

        try:
            with transaction(self.db):
                if existing:
                    self.repo.delete(existing)
                self.repo.add(
                    DailySummaryModel(
                        owner_id=summary.owner_id,
                        date=summary.date,
                        display_date=summary.display_date,
                        total_units=summary.total_units,
                        total_revenue_centavos=summary.total_revenue_centavos,
                        total_orders=summary.total_orders,
                        source_orders=list(summary.source_orders),
                    )
                )
        except PersistenceFailure as e:
            if not isinstance(e.__cause__, IntegrityError):
                raise
            logger.info(f"Concurrent summary insert for {summary.owner_id} on {summary.date}, skipped")
            return False

        logger.info(
            f"Daily summary stored for {summary.owner_id} on {summary.date}: "
            f"{summary.total_orders} orders, {summary.total_revenue_centavos} centavos, "
            f"{summary.total_units}L"
        )
        return True

    def process_date(self, ctx: SessionContext, day: date, force: bool = False) -> DailySummary | None:
        owner_id = ctx.require_user()
        if not force and self.repo.exists(owner_id, day):
            return None
        summary = self._summarize(owner_id, day)
        if summary is None:
            logger.info(f"No orders found for {owner_id} on {day}")
            return None
        return summary if self.persist_if_absent(summary, force=force) else None

    def rollover_on_date_change(
        self,
        ctx: SessionContext,
        last_processed_date: date | None,
        today: date,
    ) -> DailySummary | None:
        """Finalizes the previous day once the calendar has moved past it."""
        ctx.require_user()
        if last_processed_date is None or last_processed_date >= today:
            return None
        return self.process_date(ctx, last_processed_date)

    def check_and_process_new_day(self, ctx: SessionContext, today: date | None = None) -> DailySummary | None:
        owner_id = ctx.require_user()
        today = today or self.clock().date()
        last = self.repo.get_last_processed(owner_id)
        if last == today:
            return None

        summary = self.rollover_on_date_change(ctx, last, today)
        with transaction(self.db):
            self.repo.set_last_processed(owner_id, today)
        return summary

    def process_all_pending(self, ctx: SessionContext, today: date | None = None) -> list[date]:
        """Summarizes every past order date that has no stored summary yet."""
        owner_id = ctx.require_user()
        today = today or self.clock().date()

        processed = []
        for day in self.order_repo.order_dates(owner_id):
            if day >= today or self.repo.exists(owner_id, day):
                continue
            if self.process_date(ctx, day) is not None:
                processed.append(day)

        if processed:
            logger.info(f"Processed {len(processed)} pending daily summaries for {owner_id}")
        return processed

    def _summarize(self, owner_id: str, day: date) -> DailySummary | None:
        orders = self.order_repo.orders_between(
            owner_id, day, day, exclude_status=OrderStatus.CANCELLED
        )
        if not orders:
            return None
        return build_summary(owner_id, day, orders)
