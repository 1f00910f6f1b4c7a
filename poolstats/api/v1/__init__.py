from fastapi import APIRouter
from poolstats.api.v1.collection import router as collection_router

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(collection_router)
