"""Fetch lifecycle tracking for catalog list loads."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ERROR = "Failed to fetch products"
CANCELLED_ERROR = "Product load was cancelled"


class LoadStatus(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class LifecycleState:
    status: LoadStatus = LoadStatus.IDLE
    error: Optional[str] = None


Listener = Callable[[LifecycleState], None]


class FetchLifecycle:
    """State machine ``idle -> pending -> succeeded | failed``.

    A fetch requested while another is pending is suppressed rather than
    issued twice. After the first load the state never returns to idle.
    """

    def __init__(self) -> None:
        self._state = LifecycleState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def status(self) -> LoadStatus:
        return self._state.status

    @property
    def needs_load(self) -> bool:
        return self._state.status is LoadStatus.IDLE

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, state: LifecycleState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def run(self, fetch: Callable[[], Awaitable[T]]) -> Optional[T]:
        """Run ``fetch`` unless a load is already pending.

        Returns the fetched value, or ``None`` when the call was suppressed
        or failed (the failure is recorded on the state, not raised).
        """

        if self._state.status is LoadStatus.PENDING:
            logger.debug("Catalog load already pending; request suppressed")
            return None
        self._transition(LifecycleState(LoadStatus.PENDING, self._state.error))
        try:
            value = await fetch()
        except asyncio.CancelledError:
            self._transition(LifecycleState(LoadStatus.FAILED, CANCELLED_ERROR))
            raise
        except Exception as exc:
            logger.warning("Catalog load failed: %s", exc)
            self._transition(LifecycleState(LoadStatus.FAILED, str(exc) or DEFAULT_ERROR))
            return None
        self._transition(LifecycleState(LoadStatus.SUCCEEDED))
        return value
