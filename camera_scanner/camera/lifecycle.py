"""
Screen lifecycle.

The camera provider observes the lifecycle of the owner its use-cases are
bound to: frames flow while the owner is at least STARTED, and everything
bound to an owner is unbound when the owner is destroyed.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, List


logger = logging.getLogger(__name__)


class LifecycleState(enum.IntEnum):
    DESTROYED = 0
    INITIALIZED = 1
    CREATED = 2
    STARTED = 3
    RESUMED = 4

    def is_at_least(self, other: "LifecycleState") -> bool:
        return self >= other


LifecycleObserver = Callable[["Lifecycle", LifecycleState], None]


class Lifecycle:
    """Ordered lifecycle state with synchronous observers."""

    def __init__(self, name: str = "screen") -> None:
        self._name = name
        self._state = LifecycleState.INITIALIZED
        self._observers: List[LifecycleObserver] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> LifecycleState:
        return self._state

    def add_observer(self, observer: LifecycleObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def move_to(self, state: LifecycleState) -> None:
        """
        Move to ``state`` and notify observers.

        A destroyed lifecycle is final; later transitions are ignored.
        """
        if self._state == LifecycleState.DESTROYED or state == self._state:
            return

        logger.debug(f"{self._name}: {self._state.name} -> {state.name}")
        self._state = state

        for observer in list(self._observers):
            observer(self, state)

        if state == LifecycleState.DESTROYED:
            self._observers.clear()
