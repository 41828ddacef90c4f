"""
Celery application configuration.

The account service only publishes email work items; the worker that
renders and delivers them consumes the same queues.
"""

from celery import Celery

from src.app.services.notification_dispatcher import NotificationKind


def create_celery_app(broker_url: str, queue: str = "critical") -> Celery:
    celery_app = Celery("account_worker", broker=broker_url)

    celery_app.conf.update(
        # Serialization
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        # Timezone
        timezone="UTC",
        enable_utc=True,
        # Delivery
        task_acks_late=True,
        task_ignore_result=True,
        task_routes={kind.value: {"queue": queue} for kind in NotificationKind},
        broker_connection_retry_on_startup=True,
    )

    return celery_app
