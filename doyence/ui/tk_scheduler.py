"""Tk Event-Loop Adapters.

``TkScheduler`` implements :class:`doyence.scheduler.Scheduler` on top of
a widget's ``after`` queue.  Blocking provider calls run on daemon
threads and their outcome is scheduled back onto the UI thread with
``after(0, ...)``, so every store write happens on the main loop.

``TkActivitySource`` feeds window events to the ``InactivityMonitor``.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Any, Callable, Optional, TypeVar

from doyence.inactivity import ActivityHandler
from doyence.logger import StructuredLogger
from doyence.models.enums import ActivityKind

T = TypeVar("T")

# Tk has no touch events; wheel scrolling arrives as <MouseWheel> on
# Windows/macOS and as buttons 4/5 (<ButtonPress>) on X11.
_ACTIVITY_SEQUENCES: dict[str, ActivityKind] = {
    "<ButtonPress>": ActivityKind.MOUSE_DOWN,
    "<KeyPress>": ActivityKind.KEY_DOWN,
    "<MouseWheel>": ActivityKind.SCROLL,
    "<FocusIn>": ActivityKind.FOCUS_IN,
    "<FocusOut>": ActivityKind.FOCUS_OUT,
}


class _AfterHandle:
    """Cancellable ``after`` job."""

    def __init__(self, widget: tk.Misc, job_id: str) -> None:
        self._widget = widget
        self._job_id: Optional[str] = job_id

    def cancel(self) -> None:
        job_id, self._job_id = self._job_id, None
        if job_id is not None:
            self._widget.after_cancel(job_id)


class TkScheduler:
    """Scheduler backed by ``widget.after`` and daemon threads.

    Parameters
    ----------
    widget:
        Any widget of the running Tk application, usually the root.
    logger:
        Structured logger.
    """

    def __init__(self, widget: tk.Misc, logger: StructuredLogger) -> None:
        self._widget = widget
        self._logger = logger

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        self._widget.after(0, callback, *args)

    def call_later(
        self, delay_s: float, callback: Callable[..., Any], *args: Any
    ) -> _AfterHandle:
        job_id = self._widget.after(max(0, int(delay_s * 1000)), callback, *args)
        return _AfterHandle(self._widget, job_id)

    def run_in_background(
        self,
        func: Callable[[], T],
        on_result: Callable[[T], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Run *func* on a daemon thread; deliver its outcome via ``after(0)``."""

        def _worker() -> None:
            try:
                result = func()
            except Exception as exc:
                self._logger.debug("Background task failed: %s", exc)
                self._widget.after(0, on_error, exc)
                return
            self._widget.after(0, on_result, result)

        thread = threading.Thread(
            target=_worker,
            name=f"bg-{getattr(func, '__name__', 'task')}",
            daemon=True,
        )
        thread.start()


class TkActivitySource:
    """Binds the inactivity monitor to window-level Tk events.

    Bindings go on the root window's class-independent tag, which every
    widget of the main window carries, so activity anywhere in the
    window counts.  ``unbind`` removes only the bindings made here.
    """

    def __init__(self, root: tk.Misc) -> None:
        self._root = root
        self._bindings: list[tuple[str, str]] = []

    def bind(self, handler: ActivityHandler) -> None:
        for sequence, kind in _ACTIVITY_SEQUENCES.items():
            funcid = self._root.bind(
                sequence,
                lambda _event, kind=kind: handler(kind),
                add="+",
            )
            self._bindings.append((sequence, funcid))

    def unbind(self) -> None:
        bindings, self._bindings = self._bindings, []
        for sequence, funcid in bindings:
            self._remove_binding(sequence, funcid)

    def _remove_binding(self, sequence: str, funcid: str) -> None:
        # ``Misc.unbind(sequence, funcid)`` drops every script bound to the
        # sequence before Python 3.13; keep the lines of other handlers.
        script = self._root.bind(sequence) or ""
        prefix = f'if {{"[{funcid} '
        kept = "\n".join(
            line for line in script.split("\n") if not line.startswith(prefix)
        )
        self._root.tk.call("bind", str(self._root), sequence, kept if kept.strip() else "")
        self._root.deletecommand(funcid)
