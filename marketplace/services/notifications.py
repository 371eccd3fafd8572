"""Notification port, the DB-backed gateway, and a fire-and-forget dispatcher."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Session

from marketplace.models.notification import Notification
from marketplace.utils.constants import ALERT_TEMPLATES

logger = logging.getLogger(__name__)


class NotificationGateway(ABC):
    @abstractmethod
    def emit(self, user_id: str, event: str, payload: dict[str, Any]) -> None:
        """Deliver one event to one user. Best effort."""


class DatabaseNotificationGateway(NotificationGateway):
    """Stores each alert so the user can list it later."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def emit(self, user_id: str, event: str, payload: dict[str, Any]) -> None:
        template = ALERT_TEMPLATES.get(event)
        if template is None:
            logger.warning(f"No alert template for event {event}, dropping")
            return
        title, message, priority = template
        reason = payload.get("reason") or ""
        notification = Notification(
            recipient_id=user_id,
            type=event,
            title=title,
            message=f"{message}. {reason}".strip(),
            priority=priority,
            data=payload,
        )
        with Session(self._engine) as session:
            session.add(notification)
            session.commit()
        logger.debug(f"Stored {event} notification for {user_id}")


class BackgroundNotificationGateway(NotificationGateway):
    """Hands emits to a thread pool so callers never wait on delivery.

    Failures in the wrapped gateway are logged and dropped.
    """

    def __init__(self, inner: NotificationGateway, max_workers: int = 4):
        self._inner = inner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def emit(self, user_id: str, event: str, payload: dict[str, Any]) -> None:
        try:
            future = self._executor.submit(self._inner.emit, user_id, event, payload)
        except RuntimeError as e:
            # Executor already shut down
            logger.error(f"Could not queue {event} for {user_id}: {e}")
            return
        future.add_done_callback(lambda f: self._log_failure(f, user_id, event))

    @staticmethod
    def _log_failure(future: Future, user_id: str, event: str):
        exc = future.exception()
        if exc is not None:
            logger.error(f"Notification {event} to {user_id} failed: {exc}")

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
