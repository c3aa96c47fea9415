"""
Fan Inbox API Response Utilities
Standardized response format and error handling
"""
from fastapi import HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from .errors import ConversationNotFound, InboxError, ValidationIssue
from .logging_config import api_logger


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: str = None, meta: Dict = None) -> Dict:
    """Create success response"""
    response = {
        "ok": True,
        "timestamp": _now(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def created(data: Any, message: str = "Created successfully") -> Dict:
    """201 Created response"""
    return success(data, message)


def updated(data: Any = None, message: str = "Updated successfully") -> Dict:
    """200 Updated response"""
    return success(data, message)


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """Custom API exception with error codes"""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str = None,
        details: Dict = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code or f"ERR_{status_code}"
        self.details = details
        super().__init__(status_code=status_code, detail=message, headers=headers)


def unauthorized(message: str = "Authentication required", code: str = "UNAUTHORIZED"):
    raise ApiException(401, message, code, headers={"WWW-Authenticate": "Bearer"})

def not_found(resource: str = "Resource", id: str = None):
    message = f"{resource} not found" if not id else f"{resource} '{id}' not found"
    raise ApiException(404, message, "NOT_FOUND")


INBOX_ERROR_STATUS = {
    ConversationNotFound: 404,
    ValidationIssue: 422,
}


def _error_body(message: str, error_code: str, details: Optional[Dict] = None) -> Dict:
    return {
        "ok": False,
        "error": message,
        "error_code": error_code,
        "details": details,
        "timestamp": _now(),
    }


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def api_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Global exception handler for API errors"""

    if isinstance(exc, ApiException):
        api_logger.warning(
            f"API Error: {exc.detail}",
            status_code=exc.status_code,
            error_code=exc.error_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.error_code, exc.details),
            headers=exc.headers,
        )

    api_logger.warning(
        f"HTTP Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, f"HTTP_{exc.status_code}"),
        headers=exc.headers,
    )


async def inbox_exception_handler(request: Request, exc: InboxError) -> JSONResponse:
    """Map inbox core errors onto the response envelope."""
    status_code = next(
        (code for error_type, code in INBOX_ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    details = {"field": exc.field} if isinstance(exc, ValidationIssue) and exc.field else None

    if status_code >= 500:
        api_logger.error(f"Inbox error: {exc.message}", error=exc, path=request.url.path)
        message = "Internal server error"
    else:
        api_logger.warning(
            f"Inbox error: {exc.message}",
            status_code=status_code,
            error_code=exc.code,
            path=request.url.path,
        )
        message = exc.message

    return JSONResponse(status_code=status_code, content=_error_body(message, exc.code, details))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and query params in the standard envelope."""
    errors = [
        {"field": ".".join(str(part) for part in tuple(err.get("loc", ()))[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    api_logger.warning("Request validation failed", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=422,
        content=_error_body("Invalid request", "VALIDATION_ERROR", {"errors": errors}),
    )
