"""Authentication infrastructure."""

from docgate.infrastructure.auth.authenticator import (
    AuthenticationError,
    AuthService,
    JWTAuthService,
)
from docgate.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)

__all__ = [
    "AuthService",
    "AuthenticationError",
    "InvalidTokenError",
    "JWTAuthService",
    "JWTError",
    "JWTService",
    "TokenExpiredError",
]
