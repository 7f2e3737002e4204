"""Application services."""

from docgate.application.services.lifecycle_controller import LifecycleController

__all__ = ["LifecycleController"]
