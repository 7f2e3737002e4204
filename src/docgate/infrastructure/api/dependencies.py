"""FastAPI dependencies for service access and authentication."""

from typing import Annotated

from fastapi import Depends, Header, Request

from docgate.core.exceptions import AuthError
from docgate.core.registry import ServiceContext
from docgate.domain.entities.requester import Requester
from docgate.infrastructure.auth.authenticator import AuthenticationError


def get_services(request: Request) -> ServiceContext:
    """Get the service context resolved when the app was created."""
    return request.app.state.services


async def get_requester(
    services: Annotated[ServiceContext, Depends(get_services)],
    authorization: Annotated[str | None, Header()] = None,
) -> Requester:
    """Resolve the requester from the Authorization header.

    Requests without credentials are anonymous; the policy gate decides
    what they may do.

    Raises:
        AuthError: 401 if credentials are present but invalid.
    """
    try:
        return await services.auth_service.authenticate(authorization)
    except AuthenticationError as e:
        raise AuthError(str(e)) from e


# Type alias for dependency injection
RequesterDep = Annotated[Requester, Depends(get_requester)]
