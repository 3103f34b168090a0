"""Health check routes."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from markprint import __version__

router = APIRouter(prefix="/api/health", tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    version: str


@router.get("", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(version=__version__)
