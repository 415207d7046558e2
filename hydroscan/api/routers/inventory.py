# hydroscan/api/routers/inventory.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.schemas import StockAdjustmentOut, StockDeltaIn, StockOut, StockSetIn
from hydroscan.domain.session import SessionContext
from hydroscan.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])


def get_service(db: Session):
    return InventoryService(db)


@router.get("/", response_model=List[StockOut])
def list_stock(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        ctx.require_user()
    except HydroScanError as e:
        raise to_http(e)
    return [StockOut(key=k, quantity=q) for k, q in sorted(svc.list_stock().items())]


@router.get("/{key}", response_model=StockOut)
def get_stock(
    key: str,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        ctx.require_user()
    except HydroScanError as e:
        raise to_http(e)
    return StockOut(key=key, quantity=svc.get_quantity(key))


@router.post("/{key}/adjust", response_model=StockAdjustmentOut)
def adjust_stock(
    key: str,
    payload: StockDeltaIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """Relative change; a result below zero is floored and flagged as low stock."""
    svc = get_service(db)
    try:
        ctx.require_user()
        return svc.adjust_stock(key, payload.delta)
    except HydroScanError as e:
        raise to_http(e)


@router.put("/{key}", response_model=StockAdjustmentOut)
def set_stock(
    key: str,
    payload: StockSetIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        ctx.require_user()
        return svc.set_quantity(key, payload.quantity)
    except HydroScanError as e:
        raise to_http(e)
