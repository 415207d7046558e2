# hydroscan/api/routers/orders.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.enums import OrderStatus
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.scheduling import Schedule
from hydroscan.domain.schemas import OrderOut, OrderSubmitIn, PaymentIn, StatusIn
from hydroscan.domain.session import SessionContext
from hydroscan.services.csv_export import CsvExportService
from hydroscan.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def submit_order(
    payload: OrderSubmitIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """
    Turns the acting user's cart into an order.
    The notification is queued asynchronously.
    """
    svc = get_service(db)
    schedule = Schedule(pickup_date=payload.pickup_date, delivery_date=payload.delivery_date)
    try:
        order = svc.submit_order(ctx, schedule=schedule, use_hydrocoins=payload.use_hydrocoins)
    except HydroScanError as e:
        raise to_http(e)
    return OrderOut.from_model(order)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    status: OrderStatus | None = Query(None),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return [OrderOut.from_model(o) for o in svc.list_orders(ctx, status)]
    except HydroScanError as e:
        raise to_http(e)


@router.get("/export", response_class=PlainTextResponse)
def export_csv(
    start: date = Query(...),
    end: date = Query(...),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """Sales report for [start, end], one block per order date."""
    try:
        content = CsvExportService(db).export_range(ctx, start, end)
    except HydroScanError as e:
        raise to_http(e)
    return PlainTextResponse(content, media_type="text/csv")


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return OrderOut.from_model(svc.get_order(ctx, order_id))
    except HydroScanError as e:
        raise to_http(e)


@router.post("/{order_id}/status", response_model=OrderOut)
def change_status(
    order_id: int,
    payload: StatusIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return OrderOut.from_model(svc.change_status(ctx, order_id, payload.status))
    except HydroScanError as e:
        raise to_http(e)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        cancelled = svc.cancel_order(ctx, order_id)
        order = svc.get_order(ctx, order_id)
    except HydroScanError as e:
        raise to_http(e)
    if not cancelled:
        raise HTTPException(status_code=409, detail=f"Cannot cancel an order that is {order.status}")
    return OrderOut.from_model(order)


@router.post("/{order_id}/payment", response_model=OrderOut)
def change_payment(
    order_id: int,
    payload: PaymentIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return OrderOut.from_model(svc.change_payment(ctx, order_id, payload.is_paid))
    except HydroScanError as e:
        raise to_http(e)


@router.post("/{order_id}/complete", response_model=OrderOut)
def mark_paid_and_delivered(
    order_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return OrderOut.from_model(svc.mark_paid_and_delivered(ctx, order_id))
    except HydroScanError as e:
        raise to_http(e)
