"""
Production FastAPI Application

    granian --interface asgi src.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Settlement Service] Starting up...')

    tracing = TracingConfig(service_name='ticket-settlement')
    tracing.setup()
    Logger.base.info('📊 [Settlement Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Settlement Service] Dependency injection wired')

    database = container.database()
    await database.create_tables()
    tracing.instrument_sqlalchemy(engine=database.engine)
    Logger.base.info('🗄️  [Settlement Service] Database ready + instrumented')

    if not container.config_service().STRIPE_WEBHOOK_SECRET.get_secret_value():
        Logger.base.warning(
            '⚠️  [Settlement Service] STRIPE_WEBHOOK_SECRET not set, webhook will answer 500'
        )

    Logger.base.info('✅ [Settlement Service] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Settlement Service] Shutting down...')

    await database.dispose()
    Logger.base.info('🗄️  [Settlement Service] Database engine disposed')

    # Flush remaining spans
    tracing.shutdown()

    container.unwire()
    Logger.base.info('👋 [Settlement Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
