from fastapi import APIRouter

from docinsight.api.v1.endpoints import documents, stats, summaries

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(summaries.router, prefix="/summaries", tags=["Summaries"])
api_router.include_router(stats.router, prefix="/stats", tags=["Stats"])

__all__ = ["api_router"]
