"""
Mayfair Backend — Response Envelope Schemas
============================================

What:  Pydantic models for the JSON envelope every endpoint answers with.
Who:   Used by the fixed routes, the fallback handlers, the terminal
       fallback and the global exception handlers. Feature routers are
       expected to honour the same shape.

Envelope:
    Success:  {"success": true,  "data": ..., "message": ...}
    Error:    {"success": false, "error": {"code": ..., "message": ..., "details": ...}}

    Optional members are left out of the JSON when unset (exclude_none),
    so an error without details serializes as {"code", "message"} only.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ══════════════════════════════════════════════════════════════════════════
# Error Envelope
# ══════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable error code, e.g. ROUTE_UNAVAILABLE")
    message: str = Field(description="Human-readable description, safe to display")
    details: Optional[str] = Field(
        default=None,
        description="Extra context captured at startup (fallback routes only)",
    )


class ErrorResponse(BaseModel):
    success: bool = Field(default=False)
    error: ErrorDetail


def error_body(code: str, message: str, details: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the JSON-ready error envelope.

    Example:
        >>> error_body("NOT_FOUND", "API endpoint not found")
        {'success': False, 'error': {'code': 'NOT_FOUND', 'message': 'API endpoint not found'}}
    """
    envelope = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return envelope.model_dump(exclude_none=True)


# ══════════════════════════════════════════════════════════════════════════
# Success Envelope
# ══════════════════════════════════════════════════════════════════════════


class HealthData(BaseModel):
    status: str = Field(description="Always 'OK' while the process can answer")
    timestamp: str = Field(description="Server time (UTC ISO 8601)")
    environment: str = Field(description="Deployment environment name")
    version: str = Field(description="Application version")


class HealthResponse(BaseModel):
    success: bool = Field(default=True)
    data: HealthData


class ApiTestResponse(BaseModel):
    success: bool = Field(default=True)
    message: str
    timestamp: str


class DebugResponse(BaseModel):
    success: bool = Field(default=True)
    environment: Dict[str, Optional[str]]
    timestamp: str
