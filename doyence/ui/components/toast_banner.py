"""Toast Banner Component.

Renders ``Notifier`` toasts as a transient banner across the top of the
window.  Toasts may be raised from worker threads; rendering is always
marshalled onto the UI thread with ``self.after(0, ...)``.

**Thin UI Rule**: No business logic; only displays ``Toast`` models.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from doyence.logger import StructuredLogger
from doyence.notifications import Notifier, Toast
from doyence.ui.theme import (
    FONT_BUTTON,
    FONT_SMALL,
    PADDING_MD,
    TOAST_DEFAULT_BG,
    TOAST_DESTRUCTIVE_BG,
    TOAST_HEIGHT,
    TOAST_TEXT,
)

_DISPLAY_MS: int = 5_000


class ToastBanner(ctk.CTkFrame):
    """Single-slot banner showing the most recent toast.

    Parameters
    ----------
    parent:
        The root window.
    notifier:
        Toast channel to subscribe to.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        notifier: Notifier,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, height=TOAST_HEIGHT, fg_color=TOAST_DEFAULT_BG, corner_radius=0)
        self.pack_propagate(False)

        self._logger = logger
        self._hide_job: Optional[str] = None

        self._title_label = ctk.CTkLabel(
            self, text="", font=FONT_BUTTON, text_color=TOAST_TEXT, anchor="w",
        )
        self._title_label.pack(side="left", padx=(PADDING_MD, 8))

        self._description_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=TOAST_TEXT, anchor="w",
        )
        self._description_label.pack(side="left", fill="x", expand=True)

        self._unsubscribe = notifier.subscribe(self._on_toast)

    def _on_toast(self, toast: Toast) -> None:
        self.after(0, self._show, toast)

    def _show(self, toast: Toast) -> None:
        colour = TOAST_DESTRUCTIVE_BG if toast.is_destructive else TOAST_DEFAULT_BG
        self.configure(fg_color=colour)
        self._title_label.configure(text=toast.title)
        self._description_label.configure(text=toast.description or "")
        self.place(relx=0, rely=0, relwidth=1)
        self.lift()

        if self._hide_job is not None:
            self.after_cancel(self._hide_job)
        self._hide_job = self.after(_DISPLAY_MS, self._hide)

    def _hide(self) -> None:
        self._hide_job = None
        self.place_forget()

    def destroy(self) -> None:
        self._unsubscribe()
        if self._hide_job is not None:
            self.after_cancel(self._hide_job)
            self._hide_job = None
        super().destroy()
