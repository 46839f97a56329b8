"""
Inactivity Monitor.

Signs the user out after a fixed idle period (10 minutes by default).

Qualifying activity (mouse-down, key-down, touch-start, scroll) re-arms
the timer while the window is focused.  Focus-in/out only flip the
focus flag; they never reset or cancel the timer, so a user switching
windows back and forth is still idle.

When the timer fires, the elapsed idle time is measured against the
injected monotonic clock before signing out.  After a sign-out the
timer stays disarmed until the next qualifying activity.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from doyence.logger import StructuredLogger
from doyence.models.enums import ActivityKind
from doyence.scheduler import Scheduler, TimerHandle

ActivityHandler = Callable[[ActivityKind], None]

_ACTIVITY_KINDS: frozenset[ActivityKind] = frozenset({
    ActivityKind.MOUSE_DOWN,
    ActivityKind.KEY_DOWN,
    ActivityKind.TOUCH_START,
    ActivityKind.SCROLL,
})


class ActivitySource(Protocol):
    """Window-level event source the monitor listens to."""

    def bind(self, handler: ActivityHandler) -> None:
        ...

    def unbind(self) -> None:
        ...


class InactivityMonitor:
    """Idle timer that invokes *sign_out* once per idle period.

    Parameters
    ----------
    timeout_s:
        Idle period in seconds.
    scheduler:
        Provides ``call_later`` for the timer.
    sign_out:
        Called with no arguments when the idle period elapses.
    logger:
        Structured logger.
    clock:
        Monotonic clock in seconds; ``time.monotonic`` by default.
    """

    def __init__(
        self,
        timeout_s: float,
        scheduler: Scheduler,
        sign_out: Callable[[], None],
        logger: StructuredLogger,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be greater than zero")
        self._timeout_s = timeout_s
        self._scheduler = scheduler
        self._sign_out = sign_out
        self._logger = logger
        self._clock = clock

        self._source: Optional[ActivitySource] = None
        self._timer: Optional[TimerHandle] = None
        self._last_activity: float = clock()
        self._focused = True
        self._installed = False

    @property
    def focused(self) -> bool:
        return self._focused

    @property
    def armed(self) -> bool:
        """``True`` while an expiry timer is pending."""
        return self._timer is not None

    @property
    def last_activity(self) -> float:
        return self._last_activity

    def install(self, source: ActivitySource) -> None:
        """Start listening on *source* and arm the timer."""
        if self._installed:
            return
        self._installed = True
        self._source = source
        self._focused = True
        source.bind(self.handle)
        self._reset()
        self._logger.debug("Inactivity monitor installed (%.0fs).", self._timeout_s)

    def teardown(self) -> None:
        """Unbind every listener and cancel the timer.  Safe to repeat."""
        self._installed = False
        source, self._source = self._source, None
        if source is not None:
            source.unbind()
        self._cancel_timer()

    def handle(self, kind: ActivityKind) -> None:
        """Feed one window event to the monitor."""
        if not self._installed:
            return
        if kind == ActivityKind.FOCUS_IN:
            self._focused = True
        elif kind == ActivityKind.FOCUS_OUT:
            self._focused = False
        elif kind in _ACTIVITY_KINDS and self._focused:
            self._reset()

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self._last_activity = self._clock()
        self._arm(self._timeout_s)

    def _arm(self, delay_s: float) -> None:
        self._cancel_timer()
        self._timer = self._scheduler.call_later(delay_s, self._on_expiry)

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _on_expiry(self) -> None:
        self._timer = None
        if not self._installed:
            return

        idle_s = self._clock() - self._last_activity
        if idle_s < self._timeout_s:
            self._arm(self._timeout_s - idle_s)
            return

        self._logger.info(
            "Idle for %.0fs; signing out.", idle_s,
            extra={"event": "IDLE_LOGOUT"},
        )
        self._sign_out()
