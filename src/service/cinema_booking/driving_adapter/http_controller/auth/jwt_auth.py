"""
Bearer JWT identity

Tokens carry an opaque user id in `sub`; no user table is consulted.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import UnauthenticatedError


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(self, *, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': user_id,
            'iat': now,
            'exp': now + timedelta(minutes=self.token_expire_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise UnauthenticatedError('Invalid token') from e

    def get_user_id_from_jwt(self, token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError()
        user_id = self.decode_jwt_token(token).get('sub')
        if not user_id:
            raise UnauthenticatedError('Invalid token')
        return str(user_id)

