# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    AUTO_DELIVER_SWEEP_SECONDS,
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane explicite, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "storefront.tasks.auto_deliver",
    "storefront.services.notification_service",
    "storefront.services.activity_logger",
)

# sweep wysylek starszych niz AUTO_DELIVER_AFTER_DAYS, domyslnie raz na dobe
celery_app.conf.beat_schedule = {
    "auto-deliver-shipped-orders": {
        "task": "storefront.tasks.auto_deliver.auto_deliver_shipments_task",
        "schedule": AUTO_DELIVER_SWEEP_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
