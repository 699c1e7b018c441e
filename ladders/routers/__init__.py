"""API routers."""
from ladders.routers import admin, health, player

__all__ = [
    "admin",
    "health",
    "player",
]
