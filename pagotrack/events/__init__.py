"""Event logging package."""

from pagotrack.events.logger import EventLogger, configure_logging

__all__ = ["EventLogger", "configure_logging"]
