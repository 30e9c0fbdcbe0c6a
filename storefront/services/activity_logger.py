# storefront/services/activity_logger.py
from datetime import datetime, timezone

import requests
from requests import RequestException

from storefront.celery_worker import celery_app
from storefront.domain.principal import Principal
from storefront.utils.retry import http_retry
from storefront.utils.settings import ACTIVITY_LOG_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@http_retry()
def _post_activity(url: str, row: dict, timeout: int = 5) -> None:
    resp = requests.post(url, json=row, timeout=timeout)
    resp.raise_for_status()


class ActivityLogger:
    """
    Log aktywnosci (kto, co, z jakim wynikiem).
    Fire-and-forget: nigdy nie blokuje ani nie przerywa glownego flow.
    """

    @staticmethod
    def log(actor: Principal | None, action: str, outcome: str) -> None:
        row = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "actor": actor.account_id if actor else "system",
            "role": actor.role if actor else "system",
            "action": action,
            "outcome": outcome,
        }
        try:
            record_activity_task.delay(row)
        except Exception as e:
            logger.warning(f"Failed to enqueue activity '{action}': {e}")


@celery_app.task(name="storefront.services.activity_logger.record_activity_task")
def record_activity_task(row: dict):
    logger.info(
        f"[ACTIVITY] {row['timestamp']} {row['role']}:{row['actor']} "
        f"{row['action']} -> {row['outcome']}"
    )

    if not ACTIVITY_LOG_URL:
        return {"status": "logged"}

    try:
        _post_activity(ACTIVITY_LOG_URL, row)
    except RequestException as e:
        logger.warning(f"[ACTIVITY] Failed to deliver activity row: {e}")
        return {"status": "failed"}

    return {"status": "sent"}
