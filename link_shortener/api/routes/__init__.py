"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from link_shortener.api.routes import auth, health, links, redirect
from link_shortener.core.config import settings

# Create root router
api_router = APIRouter()

# Account, link management and health routes live under the API prefix
api_router.include_router(auth.router, prefix=settings.API_PREFIX)
api_router.include_router(links.router, prefix=settings.API_PREFIX)
api_router.include_router(health.router, prefix=settings.API_PREFIX)

# Short links are served under the redirect prefix
api_router.include_router(redirect.router)

__all__ = ["api_router"]
