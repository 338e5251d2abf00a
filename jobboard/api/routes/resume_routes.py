"""
Resume Routes

GET    /resumes              - Caller's resumes, newest first
POST   /resumes              - Save a resume document
GET    /resumes/{resume_id}  - One resume (owner, or a company it was sent to)
PUT    /resumes/{resume_id}  - Update content/feedback (owner)
DELETE /resumes/{resume_id}  - Delete (owner)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from jobboard.api.deps import get_db
from jobboard.core.auth import ensure_user_row, load_user_profile, require_session
from jobboard.core.errors import ExternalServiceError, NotFound, ValidationFailed
from jobboard.db.postgres import Database, rows_to_dicts
from jobboard.db.tables import job_applications, job_postings, resumes
from jobboard.schemas.schemas import (
    AuthSession, ResumeContent, ResumeListResponse, ResumeWrite, UserType
)
from jobboard.services.docx_export import DOCX_MEDIA_TYPE, build_resume_docx, docx_filename

log = logging.getLogger(__name__)

router = APIRouter(prefix="/resumes", tags=["Resumes"])


def validate_resume_content(content) -> dict:
    """Content must be present and carry personalInfo.fullName."""
    if not content:
        raise ValidationFailed("Resume content is required")

    personal_info = content.get("personalInfo")
    if not isinstance(personal_info, dict) or not personal_info.get("fullName"):
        raise ValidationFailed("Personal information is required")
    return content


def parse_resume_id(resume_id: str) -> UUID:
    try:
        return UUID(resume_id)
    except ValueError:
        raise ValidationFailed("Invalid resume ID format")


# ============================================================
# COLLECTION
# ============================================================

@router.get("", response_model=ResumeListResponse)
def list_resumes(
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    try:
        with db.session(session.claims) as s:
            rows = rows_to_dicts(s.execute(
                select(resumes)
                .where(resumes.c.user_id == session.user_id)
                .order_by(resumes.c.created_at.desc(), resumes.c.id.desc())
            ))
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch resumes", details=str(e))

    return {"resumes": rows, "total": len(rows)}


@router.post("")
def create_resume(
    body: ResumeWrite,
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    """
    Save a resume.

    Content is validated before anything is written, so a rejected request
    creates neither a user row nor a resume.
    """
    content = validate_resume_content(body.content)

    try:
        with db.session(session.claims) as s:
            ensure_user_row(s, session)
            resume = s.execute(
                resumes.insert().values(
                    user_id=session.user_id,
                    content=content,
                    feedback=body.feedback,
                ).returning(*resumes.c)
            ).one()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to save resume", details=str(e))

    log.info("Resume %s saved for %s", resume.id, session.user_id)
    return {"resume": dict(resume._mapping), "success": True, "message": "Resume saved successfully"}


# ============================================================
# SINGLE RESUME
# ============================================================

@router.get("/{resume_id}")
def get_resume(
    resume_id: str,
    download: bool = Query(False),
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    """
    Individuals read their own resumes. Company users read resumes that were
    sent with an application to one of their jobs.
    """
    rid = parse_resume_id(resume_id)

    try:
        with db.session(session.claims) as s:
            profile = load_user_profile(s, session.user_id)

            if profile is not None and profile.user_type == UserType.company:
                shared = s.execute(
                    select(job_applications.c.id)
                    .select_from(job_applications.join(job_postings, job_applications.c.job_id == job_postings.c.id))
                    .where(job_postings.c.company_id == profile.company_id)
                    .where(job_applications.c.resume_url.like(f"%{rid}%"))
                    .limit(1)
                ).scalar()
                if shared is None:
                    raise NotFound("Resume not found or access denied")
                row = s.execute(select(resumes).where(resumes.c.id == rid)).first()
            else:
                row = s.execute(
                    select(resumes).where(resumes.c.id == rid).where(resumes.c.user_id == session.user_id)
                ).first()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Error fetching resume data", details=str(e))

    if row is None:
        raise NotFound("Resume not found or access denied")

    resume = dict(row._mapping)

    if download:
        content = ResumeContent.model_validate(resume["content"] or {})
        return Response(
            content=build_resume_docx(content),
            media_type=DOCX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{docx_filename(content)}"'},
        )

    return {"resume": resume}


@router.put("/{resume_id}")
def update_resume(
    resume_id: str,
    body: ResumeWrite,
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    rid = parse_resume_id(resume_id)

    values = body.model_dump(exclude_unset=True)
    if "content" in values:
        validate_resume_content(values["content"])
    if not values:
        raise ValidationFailed("Nothing to update")

    try:
        with db.session(session.claims) as s:
            row = s.execute(
                resumes.update()
                .where(resumes.c.id == rid)
                .where(resumes.c.user_id == session.user_id)
                .values(**values)
                .returning(*resumes.c)
            ).first()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to update resume", details=str(e))

    if row is None:
        raise NotFound("Resume not found or access denied")

    return {"resume": dict(row._mapping), "success": True, "message": "Resume updated successfully"}


@router.delete("/{resume_id}")
def delete_resume(
    resume_id: str,
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    rid = parse_resume_id(resume_id)

    try:
        with db.session(session.claims) as s:
            deleted = s.execute(
                resumes.delete()
                .where(resumes.c.id == rid)
                .where(resumes.c.user_id == session.user_id)
                .returning(resumes.c.id)
            ).first()
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to delete resume", details=str(e))

    if deleted is None:
        raise NotFound("Resume not found or access denied")

    log.info("Resume %s deleted by %s", rid, session.user_id)
    return {"success": True, "message": "Resume deleted successfully"}
