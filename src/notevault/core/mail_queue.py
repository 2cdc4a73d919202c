"""Notification e-mail jobs.

Jobs are JSON documents pushed on a Redis list; rendering and sending is the
e-mail worker's business. Callers treat enqueueing as fire-and-forget.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import get_settings
from .redis_client import RedisClient, get_redis_client

logger = logging.getLogger(__name__)


class MailQueue:
    """Producer side of the e-mail job queue."""

    def __init__(self, redis_client: Optional[RedisClient] = None):
        self.settings = get_settings()
        self.redis_client = redis_client or get_redis_client()

    def build_notification_job(
        self, email: str, name: str, notification_type: str, title: str, message: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {
            "job": "send-email",
            "type": "notification",
            "email": email,
            "name": name,
            "data": {
                "type": notification_type.lower(),
                "title": title,
                "message": message,
                **data,
            },
            "attempts": 3,
            "queuedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def enqueue_notification_email(
        self, email: str, name: str, notification_type: str, title: str, message: str, data: Dict[str, Any]
    ) -> bool:
        """
        Queue one notification e-mail.

        Returns False when e-mails are disabled or Redis is not connected;
        Redis errors propagate to the caller.
        """
        if not self.settings.notification_emails_enabled:
            return False

        job = self.build_notification_job(email, name, notification_type, title, message, data)
        queued = await self.redis_client.enqueue(self.settings.email_queue_key, job)
        if queued:
            logger.debug(f"Queued {notification_type} e-mail for {email}")
        return queued


_mail_queue: Optional[MailQueue] = None


def get_mail_queue() -> MailQueue:
    global _mail_queue
    if _mail_queue is None:
        _mail_queue = MailQueue()
    return _mail_queue
