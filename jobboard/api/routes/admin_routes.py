"""
Admin Routes - one-shot setup operations

GET  /create-storage-bucket              - Create the resumes bucket if missing
GET  /check-and-create-tables            - Report tables, create the missing ones
POST /seed-jobs                          - Insert the fixture company and postings
POST /update-application-status-constraint - Allow WAITLIST in job_applications.status
GET  /check-env                          - Which credentials are configured

Everything except /check-env needs the service-role key in X-Service-Key.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from jobboard.api.deps import get_app_settings, get_db, get_storage
from jobboard.core.config import Settings
from jobboard.core.errors import Unauthorized
from jobboard.db.postgres import Database
from jobboard.services import bootstrap_service
from jobboard.services.storage_service import SupabaseStorageClient

log = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


def require_service_key(
    x_service_key: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings)
) -> None:
    expected = settings.supabase_service_role_key
    if not expected or not x_service_key or not hmac.compare_digest(x_service_key, expected):
        raise Unauthorized("Service key required")


@router.get("/create-storage-bucket", dependencies=[Depends(require_service_key)])
def create_storage_bucket(
    storage: SupabaseStorageClient = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    created, buckets = bootstrap_service.ensure_resume_bucket(storage, settings.resume_bucket)
    if not created:
        return {"success": True, "message": "Resumes bucket already exists", "buckets": buckets}

    return {"success": True, "message": "Resumes bucket created successfully"}


@router.get("/check-and-create-tables", dependencies=[Depends(require_service_key)])
def check_and_create_tables(db: Database = Depends(get_db)):
    return bootstrap_service.check_and_create_tables(db)


@router.post("/seed-jobs", dependencies=[Depends(require_service_key)])
def seed_jobs(db: Database = Depends(get_db)):
    return bootstrap_service.seed_jobs(db)


@router.post("/update-application-status-constraint", dependencies=[Depends(require_service_key)])
def update_application_status_constraint(db: Database = Depends(get_db)):
    return bootstrap_service.update_application_status_constraint(db)


@router.get("/check-env")
def check_env(settings: Settings = Depends(get_app_settings)):
    """Presence of each credential. Values are never returned."""
    return {
        "hasSupabaseUrl": bool(settings.supabase_url),
        "hasSupabaseAnonKey": bool(settings.supabase_anon_key),
        "hasServiceRoleKey": bool(settings.supabase_service_role_key),
        "hasJwtSecret": bool(settings.supabase_jwt_secret),
        "hasDatabaseUrl": bool(settings.database_url),
        "hasOpenAIKey": bool(settings.openai_api_key),
    }
