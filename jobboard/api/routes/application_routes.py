"""
Application Routes

POST /apply-job                      - Apply to a published job
GET  /apply-job                      - Applications to the caller company's jobs
POST /applications/{app_id}/status   - Set application status (owning company)
GET  /my-applications                - Caller's own applications
"""

import logging
import re
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from jobboard.api.deps import get_db
from jobboard.core.auth import ensure_user_row, require_company, require_session
from jobboard.core.errors import ExternalServiceError, NotFound, ValidationFailed
from jobboard.db.postgres import Database, rows_to_dicts
from jobboard.db.tables import companies, job_applications, job_postings, resumes, users
from jobboard.schemas.schemas import (
    ApplicationStatus, ApplicationStatusUpdate, ApplyJobRequest, AuthSession,
    CompanyApplicationsResponse, JobStatus, MyApplicationsResponse, UserProfile
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])

RESUME_URL_PATTERN = re.compile(r"/api/resumes/([^?/]+)")


def resume_url_for(resume_id) -> str:
    return f"/api/resumes/{resume_id}"


def resume_id_from_url(resume_url: Optional[str]) -> Optional[str]:
    match = RESUME_URL_PATTERN.search(resume_url or "")
    return match.group(1) if match else None


def as_uuid(value: Optional[str]) -> Optional[UUID]:
    try:
        return UUID(value) if value else None
    except ValueError:
        return None


# ============================================================
# APPLICANT
# ============================================================

@router.post("/apply-job")
def apply_to_job(
    req: ApplyJobRequest,
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    """
    Apply to a published job.

    Resume resolution order: resumeId (must be the caller's), resumeUrl,
    the caller's latest resume.
    """
    if req.job_id is None:
        raise ValidationFailed("Job ID is required")

    try:
        with db.session(session.claims) as s:
            job_status = s.execute(
                select(job_postings.c.status).where(job_postings.c.id == req.job_id)
            ).scalar()
            if job_status is None:
                raise NotFound("Job not found")
            if job_status != JobStatus.published.value:
                raise ValidationFailed("This job is not accepting applications")

            existing = s.execute(
                select(job_applications.c.id)
                .where(job_applications.c.job_id == req.job_id)
                .where(job_applications.c.applicant_id == session.user_id)
                .limit(1)
            ).scalar()
            if existing is not None:
                raise ValidationFailed("You have already applied to this job")

            if req.resume_id is not None:
                owned = s.execute(
                    select(resumes.c.id)
                    .where(resumes.c.id == req.resume_id)
                    .where(resumes.c.user_id == session.user_id)
                ).scalar()
                if owned is None:
                    raise ValidationFailed("Selected resume not found or access denied")
                resume_url = resume_url_for(req.resume_id)
            elif req.resume_url:
                resume_url = req.resume_url
            else:
                latest = s.execute(
                    select(resumes.c.id)
                    .where(resumes.c.user_id == session.user_id)
                    .order_by(resumes.c.created_at.desc(), resumes.c.id.desc())
                    .limit(1)
                ).scalar()
                if latest is None:
                    raise ValidationFailed("Please create a resume before applying to jobs")
                resume_url = resume_url_for(latest)

            ensure_user_row(s, session)

            application = s.execute(
                job_applications.insert().values(
                    job_id=req.job_id,
                    applicant_id=session.user_id,
                    resume_url=resume_url,
                    cover_letter_url=req.cover_letter_url,
                    status=ApplicationStatus.new.value,
                ).returning(*job_applications.c)
            ).one()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to submit application", details=str(e))

    log.info("User %s applied to job %s", session.user_id, req.job_id)
    return {
        "application": dict(application._mapping),
        "success": True,
        "message": "Application submitted successfully",
    }


@router.get("/my-applications", response_model=MyApplicationsResponse)
def my_applications(
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    """Caller's applications with job title and company name, newest first."""
    query = (
        select(
            job_applications.c.id,
            job_applications.c.job_id,
            job_applications.c.status,
            job_applications.c.created_at,
            job_postings.c.title.label("job_title"),
            companies.c.name.label("company_name"),
        )
        .select_from(
            job_applications
            .outerjoin(job_postings, job_applications.c.job_id == job_postings.c.id)
            .outerjoin(companies, job_postings.c.company_id == companies.c.id)
        )
        .where(job_applications.c.applicant_id == session.user_id)
        .order_by(job_applications.c.created_at.desc(), job_applications.c.id.desc())
    )

    try:
        with db.session(session.claims) as s:
            rows = rows_to_dicts(s.execute(query))
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch applications", details=str(e))

    return {
        "applications": [
            {
                "id": r["id"],
                "job_id": r["job_id"],
                "job_title": r["job_title"] or "Unknown Job",
                "company_name": r["company_name"] or "Unknown Company",
                "applied_at": r["created_at"],
                "status": r["status"].lower(),
            }
            for r in rows
        ],
        "success": True,
    }


# ============================================================
# COMPANY
# ============================================================

@router.get("/apply-job", response_model=CompanyApplicationsResponse)
def company_applications(
    job_id: Optional[UUID] = Query(None, alias="jobId"),
    company: UserProfile = Depends(require_company),
    db: Database = Depends(get_db)
):
    """Applications to the caller company's jobs, newest first."""
    query = (
        select(
            job_applications,
            job_postings.c.title.label("job_title"),
            companies.c.name.label("company_name"),
            users.c.email.label("applicant_email"),
        )
        .select_from(
            job_applications
            .join(job_postings, job_applications.c.job_id == job_postings.c.id)
            .outerjoin(companies, job_postings.c.company_id == companies.c.id)
            .outerjoin(users, job_applications.c.applicant_id == users.c.id)
        )
        .where(job_postings.c.company_id == company.company_id)
        .order_by(job_applications.c.created_at.desc(), job_applications.c.id.desc())
    )
    if job_id is not None:
        query = query.where(job_applications.c.job_id == job_id)

    try:
        with db.session(company.claims) as s:
            applications = rows_to_dicts(s.execute(query))

            resume_ids = {as_uuid(resume_id_from_url(a["resume_url"])) for a in applications} - {None}
            names = {}
            if resume_ids:
                for rid, content in s.execute(
                    select(resumes.c.id, resumes.c.content).where(resumes.c.id.in_(resume_ids))
                ):
                    full_name = ((content or {}).get("personalInfo") or {}).get("fullName")
                    if full_name:
                        names[str(rid)] = full_name
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch applications", details=str(e))

    for index, app in enumerate(applications):
        resume_id = resume_id_from_url(app["resume_url"])
        app["resume_id"] = resume_id
        app["company_name"] = app["company_name"] or "Unknown Company"
        app["candidate_name"] = (
            names.get(str(as_uuid(resume_id)))
            or app["applicant_email"]
            or f"Applicant {index + 1}"
        )

    return {"applications": applications, "total": len(applications)}


@router.post("/applications/{application_id}/status")
def update_application_status(
    application_id: UUID,
    update: ApplicationStatusUpdate,
    company: UserProfile = Depends(require_company),
    db: Database = Depends(get_db)
):
    """Set the status of an application to one of the caller company's jobs."""
    try:
        with db.session(company.claims) as s:
            owner = s.execute(
                select(job_postings.c.company_id)
                .select_from(job_applications.join(job_postings, job_applications.c.job_id == job_postings.c.id))
                .where(job_applications.c.id == application_id)
            ).scalar()
            if owner is None or owner != company.company_id:
                raise NotFound("Application not found")

            application = s.execute(
                job_applications.update()
                .where(job_applications.c.id == application_id)
                .values(status=update.status.value)
                .returning(*job_applications.c)
            ).one()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to update application status", details=str(e))

    log.info("Application %s set to %s", application_id, update.status.value)
    return {"application": dict(application._mapping), "success": True}
