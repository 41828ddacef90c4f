import asyncio
import logging
from typing import Any, Dict

from celery import Celery
from kombu.exceptions import KombuError

from src.app.services.notification_dispatcher import (
    DispatchError,
    INotificationDispatcher,
    NotificationKind,
)

logger = logging.getLogger(__name__)


class CeleryNotificationDispatcher(INotificationDispatcher):
    """Publishes email work items as Celery tasks by name"""

    def __init__(self, celery_app: Celery, queue: str = "critical", max_retries: int = 3):
        self.celery_app = celery_app
        self.queue = queue
        self.max_retries = max_retries

    async def enqueue(self, kind: NotificationKind, payload: Dict[str, Any]) -> None:
        try:
            # send_task blocks on the broker connection
            result = await asyncio.to_thread(
                self.celery_app.send_task,
                kind.value,
                kwargs=payload,
                queue=self.queue,
                headers={"max_retries": self.max_retries},
            )
        except KombuError as exc:
            raise DispatchError(f"Failed to publish {kind.value}") from exc

        logger.info("Queued %s task %s", kind.value, result.id)
