"""Short user-visible messages shown by the camera screen."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserMessage:
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Bounded history of messages shown to the user."""

    def __init__(self, history: int = 50) -> None:
        self._messages: Deque[UserMessage] = deque(maxlen=history)

    def show(self, text: str) -> UserMessage:
        """
        Show ``text`` to the user.

        Args:
            text: Message text

        Returns:
            The recorded message; the oldest one is dropped when the
            history is full
        """
        message = UserMessage(text)
        self._messages.append(message)
        logger.info(f"💬 {text}")
        return message

    @property
    def messages(self) -> List[UserMessage]:
        return list(self._messages)
