"""
Bearer token verification

Tokens are issued by the identity service; this service only checks the
signature and reads the caller's identity from the claims (no DB query).
"""

from typing import Any, Dict, Optional

import attrs
import jwt
from pydantic import SecretStr

from src.platform.exception.exceptions import UnauthenticatedError


@attrs.frozen
class CurrentUser:
    user_id: str
    email: str = ''
    name: str = ''


class JwtAuth:
    def __init__(self, *, secret_key: SecretStr, algorithm: str) -> None:
        self.secret = secret_key.get_secret_value()
        self.algorithm = algorithm

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise UnauthenticatedError('Invalid token') from e

    def get_current_user_from_jwt(self, token: Optional[str]) -> CurrentUser:
        if not token:
            raise UnauthenticatedError()

        payload = self.decode_jwt_token(token)
        user_id = payload.get('sub') or payload.get('user_id')
        if not user_id:
            raise UnauthenticatedError('Invalid token')

        return CurrentUser(
            user_id=str(user_id),
            email=payload.get('email') or '',
            name=payload.get('name') or '',
        )

