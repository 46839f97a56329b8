"""Form Card Component.

Centred white card used by every auth and onboarding view: brand
header, labelled entries, a primary button, an inline error label, and
secondary link buttons.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from doyence.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    BUTTON_HEIGHT,
    CARD_BORDER,
    CARD_WIDTH,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_LABEL,
    FONT_SMALL,
    FONT_SUBTITLE,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_HEIGHT,
    LINK_HOVER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class FormCard(ctk.CTkFrame):
    """Full-size frame holding one centred form card.

    Widgets are added top to bottom into :pyattr:`body`.
    """

    def __init__(self, parent: ctk.CTk, title: str, subtitle: str = "") -> None:
        super().__init__(parent, fg_color=CONTENT_BG)

        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)
        self.grid_columnconfigure(0, weight=1)

        card = ctk.CTkFrame(
            self,
            width=CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=16,
            border_width=1,
            border_color=CARD_BORDER,
        )
        card.grid(row=1, column=0)

        self.body = ctk.CTkFrame(card, fg_color="transparent")
        self.body.pack(fill="both", expand=True, padx=36, pady=28)

        ctk.CTkLabel(
            self.body, text=title, font=FONT_BRAND, text_color=TEXT_PRIMARY,
        ).pack(pady=(0, 2))
        if subtitle:
            ctk.CTkLabel(
                self.body,
                text=subtitle,
                font=FONT_SUBTITLE,
                text_color=TEXT_SECONDARY,
                wraplength=CARD_WIDTH - 80,
            ).pack(pady=(0, PADDING_MD))

        self._error_label: Optional[ctk.CTkLabel] = None
        self._primary_button: Optional[ctk.CTkButton] = None

    def add_entry(
        self,
        label: str,
        placeholder: str = "",
        secret: bool = False,
        initial: str = "",
    ) -> ctk.CTkEntry:
        ctk.CTkLabel(
            self.body,
            text=label.upper(),
            font=FONT_LABEL,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 4))

        entry = ctk.CTkEntry(
            self.body,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            show="*" if secret else "",
            height=INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
        )
        if initial:
            entry.insert(0, initial)
        entry.pack(fill="x")
        return entry

    def add_button(self, text: str, command: Callable[[], None]) -> ctk.CTkButton:
        button = ctk.CTkButton(
            self.body,
            text=text,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=command,
        )
        button.pack(fill="x", pady=(PADDING_LG, PADDING_SM))
        self._primary_button = button

        self._error_label = ctk.CTkLabel(
            self.body,
            text="",
            font=FONT_SMALL,
            text_color=ERROR_TEXT,
            wraplength=CARD_WIDTH - 80,
        )
        return button

    def add_link(self, text: str, command: Callable[[], None]) -> ctk.CTkButton:
        link = ctk.CTkButton(
            self.body,
            text=text,
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=LINK_HOVER,
            text_color=ACCENT_PRIMARY,
            height=28,
            corner_radius=CORNER_RADIUS,
            command=command,
        )
        link.pack(pady=(PADDING_SM, 0))
        return link

    def show_error(self, message: Optional[str]) -> None:
        if self._error_label is None:
            return
        if message:
            self._error_label.configure(text=message)
            self._error_label.pack(fill="x", after=self._primary_button)
        else:
            self._error_label.pack_forget()
