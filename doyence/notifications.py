"""
Toast Notifications.

Auth and profile failures reach the user as toasts.  ``Notifier`` is the
single channel for them: services call :meth:`Notifier.notify`, the UI
subscribes a renderer (``ToastBanner``), and every toast is also logged.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from pydantic import BaseModel

from doyence.logger import StructuredLogger
from doyence.models.enums import ToastVariant


class Toast(BaseModel):
    """One notification shown to the user."""

    title: str
    description: Optional[str] = None
    variant: ToastVariant = ToastVariant.DEFAULT

    model_config = {"frozen": True}

    @property
    def is_destructive(self) -> bool:
        return self.variant == ToastVariant.DESTRUCTIVE


ToastListener = Callable[[Toast], None]


class Notifier:
    """Fan-out of toasts to subscribed renderers.

    Parameters
    ----------
    logger:
        Structured logger; destructive toasts are logged at WARNING.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger
        self._lock: threading.Lock = threading.Lock()
        self._listeners: list[ToastListener] = []

    def subscribe(self, listener: ToastListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def notify(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        if toast.is_destructive:
            self._logger.warning(
                "Toast: %s: %s", title, description or "",
                extra={"event": "TOAST", "variant": str(variant)},
            )
        else:
            self._logger.info("Toast: %s", title, extra={"event": "TOAST"})

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(toast)
        return toast

    def error(self, title: str, description: Optional[str] = None) -> Toast:
        """Shortcut for a destructive toast."""
        return self.notify(title, description, ToastVariant.DESTRUCTIVE)
