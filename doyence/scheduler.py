"""
Scheduling Capability.

The session lifecycle never touches an event loop directly.  It receives a
``Scheduler`` and uses three primitives:

- ``call_soon``: run a callback on the next tick of the UI loop.  Auth
  events are re-dispatched through it so no store write happens inside
  the provider's own callback.
- ``call_later``: run a callback after a delay; returns a cancellable
  ``TimerHandle``.  Used by the inactivity monitor.
- ``run_in_background``: run a blocking provider / data-store call off
  the UI thread and deliver its outcome back through ``call_soon``.

``doyence.ui.tk_scheduler.TkScheduler`` implements this on top of Tk's
``after`` queue.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar

T = TypeVar("T")


class TimerHandle(Protocol):
    """A pending ``call_later`` callback."""

    def cancel(self) -> None:
        """Prevent the callback from running.  Safe to call repeatedly."""


class Scheduler(Protocol):
    """Event-loop capability injected into the session components."""

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        ...

    def call_later(
        self, delay_s: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle:
        ...

    def run_in_background(
        self,
        func: Callable[[], T],
        on_result: Callable[[T], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        ...
