# hydroscan/api/routers/summaries.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.enums import ReportPeriod
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.schemas import DailySummaryOut, RolloverIn, SalesReportOut
from hydroscan.domain.session import SessionContext
from hydroscan.services.daily_aggregator import DailyAggregator
from hydroscan.services.sales_report import SalesReportService

router = APIRouter(prefix="/summaries", tags=["summaries"])


def get_service(db: Session):
    return DailyAggregator(db)


@router.get("/", response_model=List[DailySummaryOut])
def list_summaries(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return [DailySummaryOut.from_summary(s) for s in svc.list_summaries(ctx)]
    except HydroScanError as e:
        raise to_http(e)


@router.post("/rollover", response_model=DailySummaryOut | None)
def rollover(
    payload: RolloverIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """Finalizes the previously seen day when the calendar has moved on."""
    svc = get_service(db)
    try:
        summary = svc.check_and_process_new_day(ctx, payload.today)
    except HydroScanError as e:
        raise to_http(e)
    return DailySummaryOut.from_summary(summary) if summary else None


@router.post("/pending", response_model=List[date])
def process_pending(
    payload: RolloverIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.process_all_pending(ctx, payload.today)
    except HydroScanError as e:
        raise to_http(e)


@router.get("/report", response_model=SalesReportOut)
def sales_report(
    period: ReportPeriod = Query(ReportPeriod.DAY),
    anchor: date | None = Query(None, description="Any date inside the period; defaults to today"),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = SalesReportService(db)
    try:
        return SalesReportOut.from_report(svc.report(ctx, period, anchor))
    except HydroScanError as e:
        raise to_http(e)


@router.get("/{day}", response_model=DailySummaryOut)
def get_summary(
    day: date,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        summary = svc.get_summary(ctx, day)
    except HydroScanError as e:
        raise to_http(e)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No summary stored for {day}")
    return DailySummaryOut.from_summary(summary)


@router.post("/{day}", response_model=DailySummaryOut | None)
def process_date(
    day: date,
    force: bool = Query(False),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """
    Summarizes one date and stores it unless a summary already exists.
    Returns null when nothing was written (no orders, or already stored).
    """
    svc = get_service(db)
    try:
        summary = svc.process_date(ctx, day, force=force)
    except HydroScanError as e:
        raise to_http(e)
    return DailySummaryOut.from_summary(summary) if summary else None
