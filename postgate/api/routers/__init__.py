"""API routers for PostGate."""

from . import health
from . import posts
from . import settings

__all__ = [
    "health",
    "posts",
    "settings",
]
