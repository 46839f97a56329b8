"""Landing View.

Public route (``/``).  Introduces the product and links to sign-in and
sign-up.  Unknown routes are redirected here.
"""

from __future__ import annotations

import customtkinter as ctk

from doyence.navigation import Router
from doyence.ui.components.form_card import FormCard


class LandingView(FormCard):
    """Welcome card with the two entry points."""

    def __init__(self, parent: ctk.CTk, router: Router) -> None:
        super().__init__(
            parent,
            "Doyence Estimating",
            "Estimates, customers and projects for painting contractors.",
        )
        self._router = router

        self.add_button("Get started", lambda: self._router.push("/register"))
        self.add_link("Sign in", lambda: self._router.push("/login"))
