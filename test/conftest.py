"""
Test Configuration and Fixtures

- Environment is set before any application module reads settings at import time
- Every test gets its own on-disk SQLite database (aiosqlite), so tests never
  share rows and can run in any order
- The DI container is overridden per test (database, unit of work, gateway, clock)
  instead of patching modules
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['SECRET_KEY'] = 'test-jwt-secret'
    os.environ['STRIPE_SECRET_KEY'] = 'sk_test_unused'
    os.environ['STRIPE_WEBHOOK_SECRET'] = 'whsec_test'
    os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')


_early_setup_test_environment()

from collections.abc import AsyncIterator, Iterator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

from dependency_injector import providers  # noqa: E402
from fastapi import FastAPI  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import Container, container  # noqa: E402
from src.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.platform.database.unit_of_work import (  # noqa: E402
    UnitOfWorkFactory,
    sqlalchemy_uow_factory,
)
from test.shared.fake_payment_gateway import FakePaymentGateway  # noqa: E402
from test.shared.utils import MutableClock, create_test_app  # noqa: E402


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc))


@pytest.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    db = Database(url=f'sqlite+aiosqlite:///{tmp_path / "settlement_test.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    return sqlalchemy_uow_factory(database.session_factory)


@pytest.fixture
def fake_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def wired_container(
    database: Database,
    uow_factory: UnitOfWorkFactory,
    fake_gateway: FakePaymentGateway,
    clock: MutableClock,
) -> Iterator[Container]:
    container.wire(modules=WIRE_MODULES)
    container.database.override(providers.Object(database))
    container.uow_factory.override(providers.Object(uow_factory))
    container.payment_gateway.override(providers.Object(fake_gateway))
    container.clock.override(providers.Object(clock))
    yield container
    container.reset_override()
    container.unwire()


@pytest.fixture
def app(wired_container: Container) -> FastAPI:
    return create_test_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url='http://test') as http_client:
        yield http_client
