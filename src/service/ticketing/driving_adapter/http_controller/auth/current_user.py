from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.platform.config.di import Container
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import (
    CurrentUser,
    JwtAuth,
)


# auto_error=False: a missing header is reported as 401 by JwtAuth, not 403
bearer_scheme = HTTPBearer(auto_error=False)


@inject
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> CurrentUser:
    """Caller identity from the bearer token (stateless, no DB query)"""
    return jwt_auth.get_current_user_from_jwt(credentials.credentials if credentials else None)
