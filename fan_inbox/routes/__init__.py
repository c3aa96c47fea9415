from .conversations import router as conversations_router
from .health import router as health_router

__all__ = [
    "conversations_router",
    "health_router",
]
