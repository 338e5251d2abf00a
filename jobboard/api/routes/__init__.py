"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobboard.api.routes.job_routes import router as job_router
from jobboard.api.routes.application_routes import router as application_router
from jobboard.api.routes.resume_routes import router as resume_router
from jobboard.api.routes.company_routes import router as company_router
from jobboard.api.routes.ai_routes import router as ai_router
from jobboard.api.routes.matching_routes import router as matching_router
from jobboard.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(resume_router)
api_router.include_router(company_router)
api_router.include_router(ai_router)
api_router.include_router(matching_router)
api_router.include_router(admin_router)
