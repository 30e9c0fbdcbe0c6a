# storefront/tasks/auto_deliver.py
import uuid
from datetime import datetime, timezone

from redis.exceptions import RedisError

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.services.fulfillment_service import FulfillmentService
from storefront.services.lock_service import LockService
from storefront.utils.settings import SWEEP_LOCK_TTL_SECONDS
from storefront.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)
lock_service = LockService()

LOCK_NAME = "auto-deliver"


@celery_app.task(name="storefront.tasks.auto_deliver.auto_deliver_shipments_task")
def auto_deliver_shipments_task():
    """Shipped -> Delivered dla przeterminowanych wysylek, odpalane przez beat."""
    owner = uuid.uuid4().hex
    add_context(job=LOCK_NAME, run_id=owner)
    logger.info("Auto-deliver sweep started")

    try:
        return _run_sweep(owner)
    finally:
        clear_context()


def _run_sweep(owner: str) -> dict:
    try:
        acquired = lock_service.acquire(LOCK_NAME, owner, ttl=SWEEP_LOCK_TTL_SECONDS)
    except RedisError as e:
        # sweep jest idempotentny, moze ruszyc bez locka
        logger.warning(f"Could not acquire sweep lock, running without it: {e}")
        acquired = None

    if acquired is False:
        logger.info("Auto-deliver sweep already running elsewhere, skipping")
        return {"delivered": 0, "skipped": True}

    db = SessionLocal()
    try:
        count = FulfillmentService(db).sweep_overdue_shipments(datetime.now(timezone.utc))
        logger.info("Auto-deliver sweep finished", delivered=count)
        return {"delivered": count, "skipped": False}
    finally:
        db.close()
        if acquired:
            try:
                lock_service.release(LOCK_NAME, owner)
            except RedisError as e:
                logger.warning(f"Failed to release sweep lock: {e}")
