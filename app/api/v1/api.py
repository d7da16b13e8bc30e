from fastapi import APIRouter

from app.api.v1.endpoints import ai, feature_flags, modules, projects

api_router = APIRouter()
api_router.include_router(feature_flags.router, prefix="/feature-flags", tags=["feature-flags"])
api_router.include_router(modules.router, prefix="/modules", tags=["modules"])
api_router.include_router(ai.router, prefix="/ai", tags=["ai"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
