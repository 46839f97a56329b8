"""
Doyence Estimating Desktop Application Entry Point.

Bootstraps the dependency graph via constructor injection and launches
the CustomTkinter GUI.  Every subsystem is wired here; no module-level
globals.

Usage::

    python main.py [initial-url]

``initial-url`` is an in-app location such as
``/login#access_token=...&refresh_token=...&type=signup`` (a magic
link handed over by the OS URL handler).
"""

from __future__ import annotations

import sys
import traceback

from doyence.app_session import create_app_session
from doyence.config import get_config
from doyence.database import DatabaseManager
from doyence.logger import StructuredLogger, get_logger
from doyence.ui.app_shell import AppShell


def main(argv: list[str]) -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting Doyence Estimating...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend connection (identity provider + data store)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )

    initial_url = argv[1] if len(argv) > 1 else "/"

    # ------------------------------------------------------------------
    # 3. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app = AppShell(
        session_factory=lambda scheduler: create_app_session(
            config=config,
            db=db,
            scheduler=scheduler,
            initial_url=initial_url,
        ),
        logger=get_logger("ui"),
    )
    app.mainloop()
    logger.info("Doyence Estimating shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so double-click users get feedback.

    Uses ``tkinter.messagebox`` (stdlib) rather than CustomTkinter so
    the dialog works even when CTk initialisation itself is the thing
    that failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="Doyence Estimating: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: fall back to stderr.
        sys.stderr.write(
            f"FATAL: {type(exc).__name__}: {exc}\n{detail}"
        )


if __name__ == "__main__":
    try:
        main(sys.argv)
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
