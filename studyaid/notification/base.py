from abc import ABC, abstractmethod
from typing import Any


class BaseNotifier(ABC):
    """Contract for delivering user-facing notifications."""

    @abstractmethod
    def notify(self, payload: dict[str, Any]) -> None:
        """Deliver one notification. Raising marks the notification job attempt as failed."""
