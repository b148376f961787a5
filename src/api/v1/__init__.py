"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.activities import router as activities_router
from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.realtime import router as realtime_router
from api.v1.routes.tasks import router as tasks_router
from api.v1.routes.users import router as users_router

router = APIRouter()
router.include_router(tasks_router)
router.include_router(users_router)
router.include_router(activities_router)
router.include_router(notifications_router)
router.include_router(realtime_router)
