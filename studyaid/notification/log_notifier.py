from typing import Any

from studyaid.logging.logger import Log
from studyaid.notification.base import BaseNotifier


class LogNotifier(BaseNotifier):
    """Writes notifications to the application log instead of delivering them."""

    def notify(self, payload: dict[str, Any]) -> None:
        user_id = payload.get("user_id")
        message = payload.get("message")
        if not message:
            raise ValueError("Notification payload requires a 'message'")
        Log.info(f"Notification for user {user_id}: {message}")
