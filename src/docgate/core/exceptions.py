"""Error taxonomy for DocGate operations.

Every error raised by the core carries the HTTP status it maps to, so the
API layer can translate it without reclassifying. Errors are raised where
the failing check lives and propagate unmodified.
"""


class DocGateError(Exception):
    """Base class for all classified DocGate errors."""

    status_code: int = 500
    default_message: str = "Unknown internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NoContentError(DocGateError):
    """Raised when a request is unnecessary (harmless no-op)."""

    status_code = 204
    default_message = "No content"


class ValidationError(DocGateError):
    """Raised when a request is not properly formatted or breaks a field rule."""

    status_code = 400
    default_message = "Bad request"


class AuthError(DocGateError):
    """Raised when the requester is not authenticated or not permitted."""

    status_code = 401
    default_message = "Not authorized"


class ForbiddenError(DocGateError):
    """Raised when a request is valid but conflicts with existing data."""

    status_code = 403
    default_message = "Action forbidden"


class NotFoundError(DocGateError):
    """Raised when a necessary document cannot be retrieved."""

    status_code = 404
    default_message = "Not found"


class LogicError(DocGateError):
    """Raised when the data is well-formed but logically invalid for the domain."""

    status_code = 418
    default_message = "I'm a teapot"


class DependencyError(DocGateError):
    """Raised when a secondary call fails."""

    status_code = 424
    default_message = "Failed dependency"


class InternalError(DocGateError):
    """Raised on programming or configuration defects (e.g. malformed rules)."""

    status_code = 500
    default_message = "Internal server error"


class ServiceError(DocGateError):
    """Raised when a required collaborator is not available."""

    status_code = 503
    default_message = "Service unavailable"
