"""API route modules."""

from .exports import router as exports_router
from .health import router as health_router
from .webhooks import router as webhooks_router

__all__ = ["exports_router", "health_router", "webhooks_router"]
