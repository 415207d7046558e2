# hydroscan/data/seed.py
from hydroscan.data.database import SessionLocal
from hydroscan.services.inventory_service import DEFAULT_STOCK_KEYS, InventoryService
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


def seed(session_factory=SessionLocal):
    """Creates a zero-quantity row for every tracked stock key; existing rows are untouched."""
    db = session_factory()
    try:
        InventoryService(db).seed_defaults()
        logger.info(f"Inventory seeded with {len(DEFAULT_STOCK_KEYS)} stock keys")
    finally:
        db.close()
