"""
API routers package for the FastAPI application.

This package contains all API endpoint routers organized by domain:
- auth_api: GitHub OAuth login/callback and logout
- users_api: current identity and faction assignment
- health_api: public config, stats and store health
- badge_api: SVG badges and cards
"""

from .auth_api import auth_api_router
from .users_api import users_api_router
from .health_api import health_api_router
from .badge_api import badge_api_router

__all__ = [
    "auth_api_router",
    "users_api_router",
    "health_api_router",
    "badge_api_router",
]
