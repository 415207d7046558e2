# hydroscan/api/routers/scans.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.payload import ScannedPayload, build_payload
from hydroscan.domain.schemas import (
    OrderOut,
    PayloadIn,
    PayloadOut,
    ScanOrderIn,
    ScanPreviewIn,
    ScanPreviewOut,
)
from hydroscan.domain.session import SessionContext
from hydroscan.services.order_service import OrderService

router = APIRouter(prefix="/scans", tags=["scans"])


@router.post("/preview", response_model=ScanPreviewOut)
def preview(payload: ScanPreviewIn):
    """Decodes a scanned label without recording anything; unreadable fields come back null."""
    scanned = ScannedPayload.from_raw(payload.payload)
    return ScanPreviewOut(
        name=scanned.name,
        address=scanned.address,
        unit=scanned.unit.label if scanned.unit else None,
        water_type=scanned.water_type,
    )


@router.post("/orders", response_model=OrderOut, status_code=201)
def record_order(
    payload: ScanOrderIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        order = svc.record_scanned_order(
            ctx,
            payload.payload,
            water_type=payload.water_type,
            quantity=payload.quantity,
            is_paid=payload.is_paid,
        )
    except HydroScanError as e:
        raise to_http(e)
    return OrderOut.from_model(order)


@router.post("/payload", response_model=PayloadOut)
def make_payload(payload: PayloadIn):
    """Builds the string to print into a customer's QR label."""
    try:
        return PayloadOut(
            payload=build_payload(payload.name, payload.address, payload.unit, payload.water_type)
        )
    except HydroScanError as e:
        raise to_http(e)
