"""
Base Service Class.

Services share a logger and the toast ``Notifier``.  A failed operation
is announced to the user and turned into an ``AuthResult`` in one place,
:meth:`BaseService._failure`.
"""

from __future__ import annotations

from typing import Any, Optional

from doyence.logger import StructuredLogger
from doyence.models.auth_models import AuthErrorCode, AuthResult
from doyence.notifications import Notifier


class BaseService:
    """Base class for all service classes. Provides a logger and toasts."""

    def __init__(self, logger: StructuredLogger, notifier: Notifier) -> None:
        self._logger: StructuredLogger = logger
        self._notifier: Notifier = notifier

    def _failure(
        self,
        title: str,
        code: AuthErrorCode,
        message: Optional[str],
        **fields: Any,
    ) -> AuthResult:
        """Raise a destructive toast and return the matching failed result."""
        self._notifier.error(title, message)
        return AuthResult(success=False, error_code=code, error_message=message, **fields)
