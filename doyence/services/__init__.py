"""
Business Logic Services Package.

Services depend on the repository layer for data access, on the
``IdentityProvider`` for credentials, and on the ``SessionStore`` for
the signed-in user.

The ``create_services()`` factory wires them together and returns a
typed dict that the session context and the views consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from doyence.config import AppConfig
from doyence.identity import IdentityProvider
from doyence.logger import StructuredLogger, get_logger
from doyence.notifications import Notifier
from doyence.repositories.company_repository import CompanyRepository
from doyence.repositories.profile_repository import ProfileRepository
from doyence.scheduler import Scheduler
from doyence.services.auth_service import AuthService
from doyence.services.profile_loader import ProfileLoader
from doyence.services.profile_setup import ProfileSetupService
from doyence.session_store import SessionStore


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    auth_service: AuthService
    profile_loader: ProfileLoader
    profile_setup_service: ProfileSetupService


def create_services(
    config: AppConfig,
    provider: IdentityProvider,
    profile_repo: ProfileRepository,
    company_repo: CompanyRepository,
    store: SessionStore,
    scheduler: Scheduler,
    notifier: Notifier,
    logger: Optional[StructuredLogger] = None,
) -> ServiceContainer:
    """
    Wire all services together.

    This is the single composition root for the service layer.  The
    session context calls this once per mount.

    Args:
        config: Application configuration.
        provider: Identity provider adapter.
        profile_repo: ``profiles`` repository.
        company_repo: ``companies`` / ``company_members`` repository.
        store: Session store for this mount.
        scheduler: Event-loop capability.
        notifier: Toast channel.
        logger: Defaults to the ``services`` logger.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = logger or get_logger("services")

    auth_service = AuthService(
        provider=provider,
        notifier=notifier,
        config=config,
        logger=logger,
    )
    profile_loader = ProfileLoader(
        repo=profile_repo,
        store=store,
        scheduler=scheduler,
        notifier=notifier,
        logger=logger,
    )
    profile_setup_service = ProfileSetupService(
        profile_repo=profile_repo,
        company_repo=company_repo,
        store=store,
        loader=profile_loader,
        scheduler=scheduler,
        notifier=notifier,
        logger=logger,
    )

    return ServiceContainer(
        auth_service=auth_service,
        profile_loader=profile_loader,
        profile_setup_service=profile_setup_service,
    )
