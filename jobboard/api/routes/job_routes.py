"""
Job Routes

GET  /jobs                 - List postings (status=open -> PUBLISHED only)
GET  /jobs/{job_id}        - Single posting
POST /jobs                 - Create posting (company only)
POST /jobs/{job_id}/status - Move DRAFT -> PUBLISHED -> CLOSED (owning company)
GET  /company/jobs         - Caller company's postings, all statuses
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from jobboard.api.deps import get_db
from jobboard.core.auth import get_optional_session, load_user_profile, require_company
from jobboard.core.errors import ExternalServiceError, NotFound, ValidationFailed
from jobboard.db.postgres import Database
from jobboard.db.tables import companies, job_postings
from jobboard.schemas.schemas import (
    AuthSession, JobCreate, JobListResponse, JobStatus, JobStatusUpdate,
    UserProfile, UserType
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["Jobs"])

# Allowed lifecycle moves
JOB_TRANSITIONS = {
    JobStatus.draft: {JobStatus.published},
    JobStatus.published: {JobStatus.closed},
    JobStatus.closed: set(),
}


# ============================================================
# HELPERS
# ============================================================

def jobs_query():
    """Postings joined with their company name, newest first."""
    return (
        select(job_postings, companies.c.name.label("company_name"))
        .select_from(job_postings.outerjoin(companies, job_postings.c.company_id == companies.c.id))
        .order_by(job_postings.c.created_at.desc(), job_postings.c.id.desc())
    )


def job_projection(row) -> dict:
    """Flatten a jobs_query() row into the shape the front end expects."""
    m = row._mapping
    company_name = m["company_name"] or "Unknown Company"
    job_type = m["job_type"] or "FULL_TIME"
    created_at = m["created_at"]
    return {
        "id": m["id"],
        "title": m["title"],
        "company": company_name,
        "company_name": company_name,
        "location": m["location"],
        "salary_range": m["salary_range"] or "Competitive",
        "type": job_type.replace("_", "-").lower(),
        "description": m["description"],
        "requirements": list(m["required_skills"] or []),
        "posted": created_at.date().isoformat(),
        "created_at": created_at,
        "status": m["status"],
        "company_id": m["company_id"],
    }


def parse_status_filter(status: Optional[str]) -> Optional[JobStatus]:
    if status is None or status == "":
        return None
    if status.lower() == "open":
        return JobStatus.published
    try:
        return JobStatus(status.upper())
    except ValueError:
        raise ValidationFailed(
            "Invalid status filter",
            details=f"Use 'open' or one of: {', '.join(s.value for s in JobStatus)}"
        )


def fetch_job(s, job_id: UUID):
    return s.execute(jobs_query().where(job_postings.c.id == job_id)).first()


def visible_to(profile: Optional[UserProfile]):
    """Published postings, plus every posting of the caller's own company."""
    published = job_postings.c.status == JobStatus.published.value
    if profile is not None and profile.user_type == UserType.company and profile.company_id is not None:
        return or_(published, job_postings.c.company_id == profile.company_id)
    return published


# ============================================================
# PUBLIC
# ============================================================

@router.get("/jobs", response_model=JobListResponse)
def list_jobs(
    status: Optional[str] = Query(None, description="'open' or a job status"),
    limit: int = Query(10, ge=1, le=100),
    session: Optional[AuthSession] = Depends(get_optional_session),
    db: Database = Depends(get_db)
):
    """
    List job postings, newest first.

    Signed-out and individual callers only see PUBLISHED postings. Company
    callers also see their own drafts and closed postings.
    """
    status_filter = parse_status_filter(status)

    query = jobs_query().limit(limit)
    if status_filter is not None:
        query = query.where(job_postings.c.status == status_filter.value)

    try:
        with db.for_caller(session) as s:
            profile = load_user_profile(s, session.user_id) if session else None
            rows = s.execute(query.where(visible_to(profile))).all()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch jobs", details=str(e))

    return {"jobs": [job_projection(r) for r in rows]}


@router.get("/jobs/{job_id}")
def get_job(
    job_id: UUID,
    session: Optional[AuthSession] = Depends(get_optional_session),
    db: Database = Depends(get_db)
):
    """Single posting. Unpublished postings are only visible to their company."""
    try:
        with db.for_caller(session) as s:
            row = fetch_job(s, job_id)
            profile = load_user_profile(s, session.user_id) if session else None
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch job", details=str(e))

    if row is None:
        raise NotFound("Job not found")

    if row._mapping["status"] != JobStatus.published.value:
        owner = (
            profile is not None
            and profile.user_type == UserType.company
            and profile.company_id == row._mapping["company_id"]
        )
        if not owner:
            raise NotFound("Job not found")

    return {"job": job_projection(row)}


# ============================================================
# COMPANY
# ============================================================

@router.post("/jobs", status_code=201)
def create_job(
    job: JobCreate,
    company: UserProfile = Depends(require_company),
    db: Database = Depends(get_db)
):
    """Create a posting for the caller's company."""
    if job.status == JobStatus.closed:
        raise ValidationFailed("New jobs must be DRAFT or PUBLISHED")

    try:
        with db.session(company.claims) as s:
            job_id = s.execute(
                job_postings.insert().values(
                    title=job.title,
                    description=job.description,
                    required_skills=job.required_skills,
                    location=job.location,
                    job_type=job.job_type.value,
                    salary_range=job.salary_range,
                    company_id=company.company_id,
                    status=job.status.value,
                ).returning(job_postings.c.id)
            ).scalar_one()
            row = fetch_job(s, job_id)
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to create job", details=str(e))

    log.info("Company %s created job %s", company.company_id, job_id)
    return {"job": job_projection(row), "success": True}


@router.post("/jobs/{job_id}/status")
def update_job_status(
    job_id: UUID,
    update: JobStatusUpdate,
    company: UserProfile = Depends(require_company),
    db: Database = Depends(get_db)
):
    """Move a posting along DRAFT -> PUBLISHED -> CLOSED."""
    try:
        with db.session(company.claims) as s:
            row = fetch_job(s, job_id)
            if row is None or row._mapping["company_id"] != company.company_id:
                raise NotFound("Job not found")

            current = JobStatus(row._mapping["status"])
            if update.status not in JOB_TRANSITIONS[current]:
                raise ValidationFailed(f"Cannot change job status from {current.value} to {update.status.value}")

            s.execute(
                job_postings.update()
                .where(job_postings.c.id == job_id)
                .values(status=update.status.value)
            )
            row = fetch_job(s, job_id)
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to update job status", details=str(e))

    return {"job": job_projection(row), "success": True}


@router.get("/company/jobs", response_model=JobListResponse)
def list_company_jobs(
    company: UserProfile = Depends(require_company),
    db: Database = Depends(get_db)
):
    """All of the caller company's postings."""
    try:
        with db.session(company.claims) as s:
            rows = s.execute(jobs_query().where(job_postings.c.company_id == company.company_id)).all()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch company jobs", details=str(e))

    return {"jobs": [job_projection(r) for r in rows]}