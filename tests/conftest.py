from __future__ import annotations

import pytest

from doyence.app_session import AppSession
from doyence.config import AppConfig
from doyence.navigation import Router
from doyence.notifications import Notifier
from doyence.session_store import SessionStore
from tests.helpers.fakes import (
    DummyLogger,
    FakeActivitySource,
    FakeClock,
    FakeCompanyRepository,
    FakeIdentityProvider,
    FakeProfileRepository,
    ManualScheduler,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def logger():
    return DummyLogger()


@pytest.fixture
def config():
    return AppConfig(
        SUPABASE_URL="",
        SITE_URL="https://app.doyence.test/",
        INACTIVITY_TIMEOUT_S=600.0,
    )


@pytest.fixture
def notifier(logger):
    return Notifier(logger)


@pytest.fixture
def toasts(notifier):
    """Every toast raised through the shared notifier, in order."""
    seen = []
    notifier.subscribe(seen.append)
    return seen


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def profile_repo():
    return FakeProfileRepository()


@pytest.fixture
def company_repo():
    return FakeCompanyRepository()


@pytest.fixture
def activity():
    return FakeActivitySource()


@pytest.fixture
def make_app(config, provider, profile_repo, company_repo, scheduler, logger, clock):
    """
    Builds an AppSession over the fakes.  Returns (app, toasts, locations)
    where locations records every location the router moved to.
    """
    created = []

    def _make(initial_url: str = "/", activity_source=None):  # noqa: ANN001
        router = Router(initial_url)
        locations = []
        router.subscribe(lambda loc: locations.append(loc.url))
        app = AppSession(
            config=config,
            provider=provider,
            profile_repo=profile_repo,
            company_repo=company_repo,
            scheduler=scheduler,
            logger=logger,
            router=router,
            clock=clock.monotonic,
        )
        seen = []
        app.notifier.subscribe(seen.append)
        app.init(activity_source)
        created.append(app)
        return app, seen, locations

    yield _make

    for app in created:
        app.dispose()
