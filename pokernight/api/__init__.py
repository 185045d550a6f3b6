"""
HTTP API for the poker night seating service.
"""

from .games import router as games_router
from .stats import router as stats_router
from .admin import router as admin_router

__all__ = ['games_router', 'stats_router', 'admin_router']
