"""
Job Matching Service

PURPOSE:
Rank published job postings against a resume document.

HOW IT WORKS:
1. Basic scoring (no AI): keyword overlap between resume and posting
   - skills vs required skills   (up to 50 points)
   - experience title keywords   (up to 30 points)
   - education field keywords    (up to 20 points)
2. AI ranking: the model scores the postings; if its answer cannot be
   decoded, the basic scoring is used instead

Scores are integers in 0-100.
"""

import logging
from typing import List

from jobboard.schemas.schemas import ResumeContent
from jobboard.services import prompts
from jobboard.services.openai_client import CompletionClient, extract_json

log = logging.getLogger(__name__)

MIN_BASIC_SCORE = 20
MAX_RESULTS = 10

ROLE_KEYWORDS = ["developer", "engineer", "manager", "designer", "analyst"]


# ============================================================
# BASIC SCORING
# ============================================================

def _matching_skills(resume: ResumeContent, job: dict) -> List[str]:
    """Resume skills that appear in (or contain) a job requirement, case-insensitive."""
    requirements = [r.lower() for r in job.get("requirements") or []]
    skills = [s.name.lower() for s in resume.skills if s.name]
    return [s for s in skills if any(r in s or s in r for r in requirements)]


def _role_match(position: str, title: str) -> bool:
    position = position.lower()
    title = title.lower()
    return any(k in position and k in title for k in ROLE_KEYWORDS)


def _education_match(field: str, title: str) -> bool:
    field = field.lower()
    title = title.lower()
    if "computer" in field or "software" in field or "engineering" in field:
        return "developer" in title or "engineer" in title
    if "design" in field:
        return "designer" in title
    if "business" in field:
        return "manager" in title
    if "data" in field or "statistics" in field:
        return "analyst" in title or "data" in title
    return False


def calculate_basic_match_score(resume: ResumeContent, job: dict) -> int:
    """
    Keyword score of a resume against a job projection.

    Args:
        resume: Resume document
        job: Job projection (title, requirements)

    Returns:
        Integer between 0 and 100
    """
    requirements = job.get("requirements") or []
    title = job.get("title") or ""

    skill_score = 0.0
    if requirements:
        skill_score = min(len(_matching_skills(resume, job)) / len(requirements) * 50, 50)

    experience_score = sum(30 for exp in resume.experiences if _role_match(exp.position or "", title))
    education_score = sum(20 for edu in resume.education if _education_match(edu.field or "", title))

    total = skill_score + min(experience_score, 30) + min(education_score, 20)
    return round(min(total, 100))


def get_match_reasons(resume: ResumeContent, job: dict) -> List[str]:
    """Human-readable reasons for a basic score."""
    reasons = []

    matching = _matching_skills(resume, job)
    if matching:
        reasons.append(f"Skills match: {', '.join(matching[:3])}")

    title = job.get("title") or ""
    relevant = next((exp for exp in resume.experiences if _role_match(exp.position or "", title)), None)
    if relevant is not None:
        reasons.append(f"Relevant experience as {relevant.position}")

    return reasons


def rank_jobs_basic(resume: ResumeContent, jobs: List[dict]) -> List[dict]:
    """Score every job, keep scores above the threshold, best first."""
    matched = [
        {
            **job,
            "matchScore": calculate_basic_match_score(resume, job),
            "matchReasons": get_match_reasons(resume, job),
            "canApply": True,
        }
        for job in jobs
    ]
    matched = [job for job in matched if job["matchScore"] > MIN_BASIC_SCORE]
    matched.sort(key=lambda j: j["matchScore"], reverse=True)
    return matched[:MAX_RESULTS]


# ============================================================
# AI RANKING
# ============================================================

def _parse_ai_matches(text: str) -> List[dict]:
    data = extract_json(text)
    if isinstance(data, dict):
        data = data.get("matches")
    if not isinstance(data, list):
        raise ValueError("Expected a list of matches")
    return data


def rank_jobs_with_ai(client: CompletionClient, resume: ResumeContent, jobs: List[dict]) -> List[dict]:
    """
    Let the model rank the jobs.

    Falls back to rank_jobs_basic when the client has no key, there are no
    jobs, or the model answer cannot be decoded. Model request failures
    propagate.
    """
    if not client.configured or not jobs:
        return rank_jobs_basic(resume, jobs)

    text = client.complete(
        prompts.match_jobs_prompt(resume, jobs),
        system_prompt=prompts.MATCH_JOBS_SYSTEM,
        max_tokens=1500,
        temperature=0.3,
        json_mode=True,
    )

    try:
        matches = _parse_ai_matches(text)
    except ValueError as e:
        log.info("AI job matching answer unusable, using basic scoring: %s", e)
        return rank_jobs_basic(resume, jobs)

    by_id = {str(job["id"]): job for job in jobs}
    ranked = []
    for match in matches:
        if not isinstance(match, dict):
            continue
        job = by_id.get(str(match.get("jobId")))
        if job is None:
            continue
        try:
            score = round(float(match.get("matchScore", 0)))
        except (TypeError, ValueError):
            continue
        ranked.append({
            **job,
            "matchScore": score,
            "matchReasons": match.get("matchReasons") or [],
            "improvementSuggestions": match.get("improvementSuggestions") or [],
            "canApply": True,
        })

    ranked.sort(key=lambda j: j["matchScore"], reverse=True)
    return ranked
