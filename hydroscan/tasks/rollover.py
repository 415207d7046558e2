# hydroscan/tasks/rollover.py
from hydroscan.celery_worker import celery_app
from hydroscan.data.database import SessionLocal
from hydroscan.domain.session import SessionContext
from hydroscan.repos.order_repo import OrderRepo
from hydroscan.services.daily_aggregator import DailyAggregator
from hydroscan.utils.logging import get_logger
from hydroscan.utils.retry import db_retry

logger = get_logger(__name__)


@db_retry()
def _process_owner(db, owner_id: str) -> int:
    aggregator = DailyAggregator(db)
    return len(aggregator.process_all_pending(SessionContext(user_id=owner_id)))


@celery_app.task(name="hydroscan.tasks.rollover.process_pending_summaries_task")
def process_pending_summaries_task():
    logger.info("Pending daily summaries task started")

    db = SessionLocal()
    total = 0
    try:
        owners = OrderRepo(db).owner_ids()
        logger.info(f"Found {len(owners)} order owners to check")

        for owner_id in owners:
            try:
                total += _process_owner(db, owner_id)
            except Exception as e:
                # one owner's failure must not block the others
                db.rollback()
                logger.warning(f"Failed to summarize pending days for {owner_id}: {e}")
    finally:
        db.close()

    logger.info(f"Pending daily summaries task stored {total} summaries")
    return total
