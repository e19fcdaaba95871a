from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any

from fastapi import FastAPI
import jwt
import orjson

from src.platform.app_factory import create_app
from src.platform.config.core_setting import Settings


class MutableClock:
    """Injected in place of ``utc_now`` so tests can move past reservation expiry"""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@asynccontextmanager
async def _noop_lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Container wiring and tables are handled by fixtures
    yield


def create_test_app() -> FastAPI:
    return create_app(lifespan=_noop_lifespan, title_suffix=' (Test)')


def auth_headers(user_id: str, *, email: str = '', name: str = '') -> dict[str, str]:
    settings = Settings()
    token = jwt.encode(
        {'sub': user_id, 'email': email, 'name': name},
        settings.SECRET_KEY.get_secret_value(),
        algorithm=settings.ALGORITHM,
    )
    return {'Authorization': f'Bearer {token}'}


def gateway_event(event_type: str, obj: dict[str, Any], *, event_id: str = 'evt_test_1') -> bytes:
    """Raw webhook body in the gateway's event envelope"""
    return orjson.dumps({'id': event_id, 'type': event_type, 'data': {'object': obj}})
