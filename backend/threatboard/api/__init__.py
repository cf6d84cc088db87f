from fastapi import APIRouter

from ..services.catalog import ACTORS, FEEDS, INCIDENTS, INDICATORS
from . import auth, routes, views
from .resources import build_resource_router

router = APIRouter()
router.include_router(routes.router)
router.include_router(auth.router)
router.include_router(views.router)
router.include_router(build_resource_router(ACTORS), prefix="/actors", tags=["Threat Actors"])
router.include_router(build_resource_router(INDICATORS), prefix="/indicators", tags=["Indicators"])
router.include_router(build_resource_router(INCIDENTS), prefix="/incidents", tags=["Incidents"])
router.include_router(build_resource_router(FEEDS), prefix="/feeds", tags=["Threat Feeds"])
# Document-store clients address feeds as sources
router.include_router(build_resource_router(FEEDS), prefix="/sources", include_in_schema=False)

__all__ = ["router"]
