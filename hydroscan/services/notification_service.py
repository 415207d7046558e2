# hydroscan/services/notification_service.py
from hydroscan.celery_worker import celery_app
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order notifications.
    Queued through Celery so order submission never waits on delivery.
    """

    @staticmethod
    def send_order_notification(user_id: str, order_number: str, status: str):
        send_order_notification_task.delay(user_id, order_number, status)


@celery_app.task(name="hydroscan.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: str, order_number: str, status: str):
    """
    Celery task; a real deployment would push an SMS or app notification here.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} is {status}")

    return {"user_id": user_id, "order_number": order_number, "status": status}
