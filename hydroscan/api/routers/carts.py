# hydroscan/api/routers/carts.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hydroscan.api.deps import get_session_context
from hydroscan.api.errors import to_http
from hydroscan.data.database import get_db
from hydroscan.domain.errors import HydroScanError
from hydroscan.domain.money import to_decimal
from hydroscan.domain.schemas import (
    CartItemIn,
    CartItemOut,
    CartOut,
    DiscountOut,
    QuantityIn,
)
from hydroscan.domain.session import SessionContext
from hydroscan.services.cart_service import CartService, apply_hydrocoin_discount
from hydroscan.services.hydrocoin_ledger import HydroCoinLedger

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db=db)


def cart_out(svc: CartService, ctx: SessionContext) -> CartOut:
    items = svc.list_items(ctx)
    return CartOut(
        owner_id=ctx.require_user(),
        items=[CartItemOut.from_model(i) for i in items],
        total=to_decimal(sum(i.line_total_centavos for i in items)),
    )


@router.get("/", response_model=CartOut)
def get_cart(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return cart_out(svc, ctx)
    except HydroScanError as e:
        raise to_http(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.add_item(ctx, payload.to_input())
        return cart_out(svc, ctx)
    except HydroScanError as e:
        raise to_http(e)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_quantity(
    item_id: int,
    payload: QuantityIn,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.update_quantity(ctx, item_id, payload.quantity)
        return cart_out(svc, ctx)
    except HydroScanError as e:
        raise to_http(e)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.remove_item(ctx, item_id)
        return cart_out(svc, ctx)
    except HydroScanError as e:
        raise to_http(e)


@router.delete("/", response_model=CartOut)
def clear_cart(
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.clear(ctx)
        return cart_out(svc, ctx)
    except HydroScanError as e:
        raise to_http(e)


@router.get("/discount", response_model=DiscountOut)
def preview_discount(
    use_hydrocoins: bool = Query(True),
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    """Checkout preview; nothing is debited until the order is submitted."""
    svc = get_service(db)
    try:
        total = svc.compute_total(ctx)
        balance = HydroCoinLedger(db).balance(ctx.require_user())
    except HydroScanError as e:
        raise to_http(e)

    discounted, coins = apply_hydrocoin_discount(total, balance if use_hydrocoins else 0)
    return DiscountOut(
        total=to_decimal(total),
        discounted_total=to_decimal(discounted),
        coins_consumed=coins,
        balance=balance,
    )
