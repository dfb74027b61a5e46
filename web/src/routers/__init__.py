"""Route modules."""

from web.src.routers.pages import router as pages_router

__all__ = ["pages_router"]
