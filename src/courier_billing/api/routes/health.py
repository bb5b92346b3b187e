"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...persistence import storage_backend

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Liveness plus the storage backend in use."""
    return {"status": "ok", "storage": storage_backend()}
