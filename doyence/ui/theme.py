"""UI Theme Constants for Doyence Estimating.

Centralises all colour, font, and sizing constants for the
CustomTkinter interface.

This file contains **zero logic**; only ``Final`` constants.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

HEADER_BG: Final[str] = "#1f2a37"
HEADER_TEXT: Final[str] = "#f3f4f6"

CONTENT_BG: Final[str] = "#f3f4f6"
CONTENT_CARD_BG: Final[str] = "#ffffff"
CARD_BORDER: Final[str] = "#e5e7eb"

ACCENT_PRIMARY: Final[str] = "#2563eb"
ACCENT_HOVER: Final[str] = "#1d4ed8"
LINK_HOVER: Final[str] = "#eef2ff"
TEXT_PRIMARY: Final[str] = "#111827"
TEXT_SECONDARY: Final[str] = "#6b7280"
TEXT_LIGHT: Final[str] = "#ffffff"

# Input / form
INPUT_BG: Final[str] = "#ffffff"
INPUT_BORDER: Final[str] = "#d1d5db"
ERROR_TEXT: Final[str] = "#dc2626"
SUCCESS_TEXT: Final[str] = "#16a34a"

# Toasts
TOAST_DEFAULT_BG: Final[str] = "#111827"
TOAST_DESTRUCTIVE_BG: Final[str] = "#b91c1c"
TOAST_TEXT: Final[str] = "#ffffff"

LOGOUT_PRIMARY: Final[str] = "#dc2626"
LOGOUT_HOVER: Final[str] = "#b91c1c"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 22, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_SUBTITLE: Final[tuple[str, int]] = (FONT_FAMILY, 12)
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

HEADER_HEIGHT: Final[int] = 56
TOAST_HEIGHT: Final[int] = 52
MAIN_WINDOW_WIDTH: Final[int] = 1100
MAIN_WINDOW_HEIGHT: Final[int] = 760
MIN_WINDOW_WIDTH: Final[int] = 480
MIN_WINDOW_HEIGHT: Final[int] = 640
CARD_WIDTH: Final[int] = 440
INPUT_HEIGHT: Final[int] = 40
BUTTON_HEIGHT: Final[int] = 44
CORNER_RADIUS: Final[int] = 8
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 16
PADDING_LG: Final[int] = 24
