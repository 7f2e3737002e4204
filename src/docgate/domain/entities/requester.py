"""Requester entity: the identity attempting an operation."""

from dataclasses import dataclass

ANONYMOUS_LABEL = "anonymous"


@dataclass(frozen=True)
class Requester:
    """Identity of the caller.

    Attributes:
        uid: User ID, or None for anonymous requests.
        admin: Whether the user has admin rights.
    """

    uid: str | None = None
    admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.uid is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.admin

    def label(self) -> str:
        """Name used in log messages."""
        return self.uid if self.uid is not None else ANONYMOUS_LABEL


ANONYMOUS = Requester()
