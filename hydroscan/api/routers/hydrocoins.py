# hydroscan/api/routers/hydrocoins.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.schemas import BalanceOut, CoinAmountIn, DebitOut
from hydroscan.domain.session import SessionContext
from hydroscan.services.hydrocoin_ledger import HydroCoinLedger

router = APIRouter(prefix="/hydrocoins", tags=["hydrocoins"])


@router.get("/", response_model=BalanceOut)
def get_balance(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    try:
        owner_id = ctx.require_user()
    except HydroScanError as e:
        raise to_http(e)
    return BalanceOut(owner_id=owner_id, balance=HydroCoinLedger(db).balance(owner_id))


@router.post("/debit", response_model=DebitOut)
def debit(
    payload: CoinAmountIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """A shortfall is not an error: success is false and the balance is untouched."""
    ledger = HydroCoinLedger(db)
    try:
        owner_id = ctx.require_user()
        success = ledger.debit(owner_id, payload.amount)
    except HydroScanError as e:
        raise to_http(e)
    return DebitOut(success=success, balance=ledger.balance(owner_id))
