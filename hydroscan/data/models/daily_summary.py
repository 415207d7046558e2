from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Date, DateTime, JSON, UniqueConstraint

from hydroscan.data.database import Base


class DailySummaryModel(Base):
    __tablename__ = "daily_summaries"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False)
    display_date = Column(String(32), nullable=False)

    total_units = Column(Integer, nullable=False)
    total_revenue_centavos = Column(Integer, nullable=False)
    total_orders = Column(Integer, nullable=False)
    source_orders = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # one summary per owner per day; the insert relies on this for idempotence
    __table_args__ = (UniqueConstraint("owner_id", "date", name="u_summary_owner_date"),)


class RolloverStateModel(Base):
    __tablename__ = "rollover_state"

    owner_id = Column(String(64), primary_key=True)
    last_processed_date = Column(Date, nullable=True)
