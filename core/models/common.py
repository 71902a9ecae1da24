# =============================================================================
# core/models/common.py - Shared Schemas
# =============================================================================
# Pagination and error envelope schemas used across routers.
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    """Pagination block returned with every list endpoint."""
    page: int = Field(..., ge=1, examples=[1])
    limit: int = Field(..., ge=1, examples=[20])
    total: int = Field(..., ge=0, examples=[42])
    total_pages: int = Field(..., ge=0, examples=[3])


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE endpoints."""
    id: str
    message: str


class ErrorResponse(BaseModel):
    """
    Uniform error envelope.

    Example:
        {
            "errorCode": "CERTIFICATE_NOT_FOUND",
            "message": "Certificate not found",
            "timestamp": "2024-01-15T10:30:00+00:00",
            "path": "/api/certificates/550e8400-...",
            "method": "GET",
            "correlationId": "3f2a..."
        }
    """
    errorCode: str
    message: Any
    details: Any | None = None
    timestamp: str
    path: str
    method: str
    correlationId: str | None = None
