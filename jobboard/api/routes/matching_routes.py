"""
Matching Routes

POST /match-jobs        - Rank the latest published jobs against a resume
POST /match-candidates  - Score every application to one of the caller company's jobs
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from jobboard.api.deps import get_ai_client, get_db
from jobboard.api.routes.application_routes import as_uuid, resume_id_from_url
from jobboard.api.routes.job_routes import fetch_job, job_projection, jobs_query
from jobboard.core.auth import require_company, require_session
from jobboard.core.errors import (
    APIError, ConfigurationError, ExternalServiceError, NotFound, ValidationFailed
)
from jobboard.db.postgres import Database, rows_to_dicts
from jobboard.db.tables import job_applications, job_postings, resumes
from jobboard.schemas.schemas import (
    AuthSession, JobStatus, MatchCandidatesRequest, ResumeContent, UserProfile
)
from jobboard.services import prompts
from jobboard.services.content_service import score_candidate
from jobboard.services.matching_service import rank_jobs_with_ai
from jobboard.services.openai_client import CompletionClient

log = logging.getLogger(__name__)

router = APIRouter(tags=["Matching"])

# Published postings considered per ranking request
MATCH_POOL_SIZE = 20


@router.post("/match-jobs")
def match_jobs(
    resume: ResumeContent,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client),
    db: Database = Depends(get_db)
):
    """
    Rank the latest published jobs against the posted resume.

    Uses the model when a key is configured, keyword scoring otherwise.
    """
    query = (
        jobs_query()
        .where(job_postings.c.status == JobStatus.published.value)
        .limit(MATCH_POOL_SIZE)
    )

    try:
        with db.session(session.claims) as s:
            jobs = [job_projection(r) for r in s.execute(query).all()]
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch jobs", details=str(e))

    try:
        ranked = rank_jobs_with_ai(ai, resume, jobs)
    except ExternalServiceError as e:
        raise ExternalServiceError("Failed to match jobs", details=e.message)

    return {"jobs": ranked}


@router.post("/match-candidates")
def match_candidates(
    req: MatchCandidatesRequest,
    company: UserProfile = Depends(require_company),
    ai: CompletionClient = Depends(get_ai_client),
    db: Database = Depends(get_db)
):
    """
    Score each application to the job and store the result in matching_score.

    An application whose resume cannot be loaded or scored is returned as it
    was.
    """
    if req.job_id is None:
        raise ValidationFailed("Job ID is required")

    try:
        with db.session(company.claims) as s:
            row = fetch_job(s, req.job_id)
            if row is None or row._mapping["company_id"] != company.company_id:
                raise NotFound("Job not found")
            job = job_projection(row)

            applications = rows_to_dicts(s.execute(
                select(job_applications)
                .where(job_applications.c.job_id == req.job_id)
                .order_by(job_applications.c.created_at.desc(), job_applications.c.id.desc())
            ))
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to fetch applications", details=str(e))

    if not ai.configured:
        raise ConfigurationError("OpenAI API key not configured")

    scored = []
    for application in applications:
        try:
            scored.append(_score_application(db, company, ai, job, application))
        except (APIError, SQLAlchemyError, ValueError, ValidationError) as e:
            log.warning("Could not score application %s: %s", application["id"], e)
            scored.append(application)

    return {"success": True, "data": scored}


def _score_application(db: Database, company: UserProfile, ai: CompletionClient, job: dict, application: dict) -> dict:
    resume_id = as_uuid(resume_id_from_url(application["resume_url"]))
    if resume_id is None:
        raise ValueError("Application has no stored resume")

    with db.session(company.claims) as s:
        content = s.execute(select(resumes.c.content).where(resumes.c.id == resume_id)).scalar()
    if content is None:
        raise ValueError("Resume not found")

    score = score_candidate(ai, job, prompts.resume_text(ResumeContent.model_validate(content)))

    with db.session(company.claims) as s:
        s.execute(
            job_applications.update()
            .where(job_applications.c.id == application["id"])
            .values(matching_score=score)
        )

    return {**application, "matching_score": score}
