"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html

The container only provides infrastructure (settings, database, unit of work
factory, gateway, clock, auth). Components are assembled per request by their
``depends`` classmethods, which pull these providers through ``Provide``.
Tests override providers instead of patching modules.
"""

from dependency_injector import containers, providers

from src.platform.clock.utc_clock import utc_now
from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import sqlalchemy_uow_factory
from src.service.ticketing.driven_adapter.payment_gateway.stripe_payment_gateway_impl import (
    StripePaymentGatewayImpl,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (one engine + session maker per container)
    database = providers.Singleton(
        Database,
        url=config_service.provided.DATABASE_URL_ASYNC,
        echo=False,
        pool_size=config_service.provided.DB_POOL_SIZE,
        max_overflow=config_service.provided.DB_POOL_MAX_OVERFLOW,
        pool_timeout=config_service.provided.DB_POOL_TIMEOUT,
        pool_recycle=config_service.provided.DB_POOL_RECYCLE,
        pool_pre_ping=config_service.provided.DB_POOL_PRE_PING,
    )

    # Unit of Work factory: each call opens a fresh session
    uow_factory = providers.Singleton(
        sqlalchemy_uow_factory, session_factory=database.provided.session_factory
    )

    # Payment gateway (Stripe)
    payment_gateway = providers.Singleton(
        StripePaymentGatewayImpl,
        api_key=config_service.provided.STRIPE_SECRET_KEY,
        webhook_secret=config_service.provided.STRIPE_WEBHOOK_SECRET,
    )

    # Time source, overridden by tests to move past reservation expiry
    clock = providers.Object(utc_now)

    # Auth service
    jwt_auth = providers.Singleton(
        JwtAuth,
        secret_key=config_service.provided.SECRET_KEY,
        algorithm=config_service.provided.ALGORITHM,
    )


container = Container()
