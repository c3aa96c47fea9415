"""
Fan Inbox Health Check Routes
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
import sys
import psutil
from typing import Dict, Any

from ..inbox import InboxService, get_inbox

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = datetime.now(timezone.utc)


def get_uptime() -> str:
    """Get service uptime as human-readable string"""
    delta = datetime.now(timezone.utc) - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_store(inbox: InboxService) -> Dict[str, Any]:
    """Check the conversation store is seeded"""
    stats = inbox.store.stats()
    return {
        "status": "healthy" if stats["conversations"] > 0 else "unhealthy",
        **stats,
    }


def check_system() -> Dict[str, Any]:
    """Check process resources"""
    try:
        process = psutil.Process()
        memory = process.memory_info()
        return {
            "status": "healthy",
            "memory_rss_mb": round(memory.rss / (1024 * 1024), 2),
            "threads": process.num_threads(),
            "python_version": sys.version.split()[0],
        }
    except psutil.Error as e:
        return {
            "status": "unknown",
            "error": str(e),
        }


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# ROUTES
# ============================================================

@router.get("")
@router.get("/live")
def health_live():
    """
    Liveness probe - is the service running?
    """
    return {
        "ok": True,
        "status": "alive",
        "uptime": get_uptime(),
        "timestamp": _timestamp(),
    }


@router.get("/ready")
def health_ready(inbox: InboxService = Depends(get_inbox)):
    """
    Readiness probe - is the conversation store loaded?
    """
    store = check_store(inbox)
    ready = store["status"] == "healthy"
    return {
        "ok": ready,
        "status": "ready" if ready else "not_ready",
        "checks": {"store": store["status"]},
        "timestamp": _timestamp(),
    }


@router.get("/full")
def health_full(inbox: InboxService = Depends(get_inbox)):
    """
    Full health check - store, cache and process details.
    """
    store = check_store(inbox)
    system = check_system()

    statuses = [store["status"], system["status"]]
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif "unknown" in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    return {
        "ok": overall == "healthy",
        "status": overall,
        "uptime": get_uptime(),
        "started_at": START_TIME.isoformat(),
        "checks": {
            "store": store,
            "cache": {"status": "healthy", **inbox.cache.stats()},
            "system": system,
        },
        "timestamp": _timestamp(),
    }
