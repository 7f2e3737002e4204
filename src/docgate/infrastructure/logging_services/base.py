"""Base abstraction for audit logging services."""

from abc import ABC, abstractmethod


class LoggingService(ABC):
    """Fire-and-forget sink for audit messages."""

    @abstractmethod
    def log(self, message: str) -> None:
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        ...

    @abstractmethod
    def warn(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...
