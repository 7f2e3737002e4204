"""Authentication services resolving credentials into a Requester.

Missing credentials produce the anonymous requester; invalid credentials
raise ``AuthenticationError`` and are rejected before any collection
operation runs.
"""

from abc import ABC, abstractmethod

from docgate.core.logging import get_logger
from docgate.domain.entities.requester import ANONYMOUS, Requester
from docgate.infrastructure.auth.jwt_service import JWTError, JWTService

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Raised when presented credentials cannot be verified."""

    pass


class AuthService(ABC):
    """Turns an Authorization header into a Requester."""

    @abstractmethod
    async def authenticate(self, authorization: str | None) -> Requester:
        """Resolve the requester for a request.

        Args:
            authorization: Raw Authorization header value, if any.

        Returns:
            The authenticated requester, or ANONYMOUS without credentials.

        Raises:
            AuthenticationError: If credentials are present but invalid.
        """
        ...


class JWTAuthService(AuthService):
    """Authenticates ``Bearer`` access tokens issued by ``JWTService``."""

    def __init__(self, jwt_service: JWTService | None = None) -> None:
        self.jwt_service = jwt_service or JWTService()

    async def authenticate(self, authorization: str | None) -> Requester:
        if not authorization:
            return ANONYMOUS

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            logger.info("Authentication failed: invalid Authorization header format")
            raise AuthenticationError("Invalid Authorization header format")

        try:
            payload = self.jwt_service.validate_access_token(parts[1])
        except JWTError as e:
            logger.info("Authentication failed", error=str(e))
            raise AuthenticationError(str(e)) from e

        user_id = payload.get("sub")
        if not user_id:
            logger.warning("Authentication failed: missing claim in token", missing_claim="sub")
            raise AuthenticationError("Missing claim: sub")

        return Requester(uid=str(user_id), admin=payload.get("admin") is True)
