"""Main API router that aggregates all endpoint routers."""

from fastapi import APIRouter

from backoffice.api.endpoints import documents, health, records

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include master records router
api_router.include_router(records.router, prefix="/records", tags=["Records"])

# Include documents router
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])

# Include health router
api_router.include_router(health.router, tags=["Health"])


@api_router.get("/")
async def api_root():
    """API root endpoint."""
    return {
        "message": "Back Office API v1",
        "endpoints": {
            "records": "/api/v1/records/{items|suppliers|customers}",
            "documents": "/api/v1/documents/{purchases|sales|vouchers}",
            "health": "/api/v1/health",
        },
    }
