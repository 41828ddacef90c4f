from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict


class NotificationKind(str, Enum):
    send_verify_email = "send_verify_email"
    send_forgot_password_email = "send_forgot_password_email"


class DispatchError(Exception):
    """Work item could not be handed to the queue"""


class INotificationDispatcher(ABC):
    """Accepts durable email work items; delivery happens elsewhere"""

    @abstractmethod
    async def enqueue(self, kind: NotificationKind, payload: Dict[str, Any]) -> None:
        """Queue a work item; raises DispatchError when the queue rejects it"""
        pass
