"""Health check endpoint reporting backend reachability."""

from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from backoffice import __version__
from backoffice.api.deps import BackendClient

router = APIRouter()


class ServiceStatus(BaseModel):
    """Status of an individual service."""
    available: bool
    message: Optional[str] = None
    latency_ms: Optional[float] = None


class HealthResponse(BaseModel):
    """Health check response with all service statuses."""
    status: str  # "healthy" or "unhealthy"
    timestamp: str
    version: str
    services: Dict[str, ServiceStatus]


@router.get("/health", response_model=HealthResponse)
async def health_check(client: BackendClient) -> HealthResponse:
    """Report whether the REST backend answers."""
    start = datetime.now()
    available = await client.health_check()
    latency = (datetime.now() - start).total_seconds() * 1000

    if available:
        backend = ServiceStatus(available=True, latency_ms=latency)
    else:
        backend = ServiceStatus(
            available=False,
            message=f"Backend not responding at {client.base_url}",
        )

    return HealthResponse(
        status="healthy" if available else "unhealthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        services={"backend": backend},
    )
