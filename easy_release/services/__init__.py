"""Release services: version calculation, checks, steps and the controller."""

from .release import USAGE, ReleaseService

__all__ = ["USAGE", "ReleaseService"]
