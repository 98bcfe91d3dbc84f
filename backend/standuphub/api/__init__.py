"""API router package."""

from fastapi import APIRouter

from standuphub.api.v1 import content, health, reports, tasks

router = APIRouter()

# Include all API routers
router.include_router(health.router, tags=["Health"])
router.include_router(content.router, prefix="/content", tags=["Content"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
