# hydroscan/api/__init__.py
from fastapi import APIRouter

from hydroscan.api.routers import (
    carts,
    health,
    hydrocoins,
    inventory,
    orders,
    scans,
    summaries,
    users,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(carts.router)
api_router.include_router(orders.router)
api_router.include_router(inventory.router)
api_router.include_router(hydrocoins.router)
api_router.include_router(summaries.router)
api_router.include_router(scans.router)
