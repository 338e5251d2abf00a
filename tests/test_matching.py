"""
Job ranking and candidate scoring.
"""
import json

from sqlalchemy import select

from conftest import FakeCompletionClient, auth_headers, insert_company, insert_job, insert_resume, insert_user
from jobboard.core.errors import ExternalServiceError
from jobboard.db.tables import job_applications
from jobboard.schemas.schemas import ResumeContent
from jobboard.services.matching_service import (
    calculate_basic_match_score, get_match_reasons, rank_jobs_basic, rank_jobs_with_ai
)

RESUME = ResumeContent.model_validate({
    "personalInfo": {"fullName": "Jane Doe"},
    "experiences": [{"position": "Software Engineer", "company": "Initech"}],
    "education": [{"degree": "BSc", "field": "Computer Science"}],
    "skills": [{"name": "Python"}, {"name": "SQL"}, {"name": "Docker"}],
})


def job(job_id, title, requirements):
    return {"id": job_id, "title": title, "company": "Acme", "location": "Remote",
            "salary_range": "Competitive", "description": title, "requirements": requirements}


# ============================================================
# BASIC SCORING
# ============================================================

def test_full_basic_score():
    # 2/2 skills -> 50, engineer title -> 30, computer science -> 20
    assert calculate_basic_match_score(RESUME, job("1", "Backend Engineer", ["Python", "SQL"])) == 100


def test_partial_basic_score():
    # 1/4 skills -> 12.5, no role or education match
    assert calculate_basic_match_score(RESUME, job("1", "Chef", ["Python", "Knives", "Pans", "Salt"])) == 12


def test_skill_match_is_substring_and_case_insensitive():
    score = calculate_basic_match_score(RESUME, job("1", "Chef", ["python 3", "docker compose"]))
    assert score == 50


def test_job_without_requirements():
    assert calculate_basic_match_score(RESUME, job("1", "Platform Engineer", [])) == 50


def test_match_reasons():
    reasons = get_match_reasons(RESUME, job("1", "Data Engineer", ["SQL"]))
    assert "Skills match: sql" in reasons
    assert "Relevant experience as Software Engineer" in reasons


def test_rank_basic_keeps_scores_above_threshold_best_first():
    jobs = [
        job("low", "Chef", ["Python", "Knives", "Pans", "Salt"]),
        job("mid", "Chef", ["Python"]),
        job("top", "Backend Engineer", ["Python", "SQL"]),
    ]
    ranked = rank_jobs_basic(RESUME, jobs)
    assert [j["id"] for j in ranked] == ["top", "mid"]
    assert all(j["canApply"] for j in ranked)


def test_rank_basic_returns_at_most_ten():
    jobs = [job(str(i), "Backend Engineer", ["Python"]) for i in range(15)]
    assert len(rank_jobs_basic(RESUME, jobs)) == 10


# ============================================================
# AI RANKING
# ============================================================

def test_rank_without_key_uses_basic_scoring():
    client = FakeCompletionClient(configured=False)
    jobs = [job("a", "Backend Engineer", ["Python"])]
    assert rank_jobs_with_ai(client, RESUME, jobs) == rank_jobs_basic(RESUME, jobs)


def test_rank_with_ai():
    answer = {"matches": [
        {"jobId": "b", "matchScore": 60, "matchReasons": ["ok"]},
        {"jobId": "a", "matchScore": 90, "matchReasons": ["great"], "improvementSuggestions": ["learn Go"]},
        {"jobId": "unknown", "matchScore": 99},
    ]}
    client = FakeCompletionClient([json.dumps(answer)])
    jobs = [job("a", "Chef", []), job("b", "Cook", [])]

    ranked = rank_jobs_with_ai(client, RESUME, jobs)

    assert [(j["id"], j["matchScore"]) for j in ranked] == [("a", 90), ("b", 60)]
    assert ranked[0]["improvementSuggestions"] == ["learn Go"]
    assert "[a] Chef" in client.calls[0]["user"]


def test_rank_with_unusable_ai_answer_uses_basic_scoring():
    client = FakeCompletionClient(["I think job a is best"])
    jobs = [job("a", "Backend Engineer", ["Python"])]
    assert rank_jobs_with_ai(client, RESUME, jobs) == rank_jobs_basic(RESUME, jobs)


# ============================================================
# ENDPOINTS
# ============================================================

def test_match_jobs_considers_only_published(client, ai, db, individual):
    _, headers = individual
    company_id = insert_company(db)
    insert_job(db, company_id, "Backend Engineer", "PUBLISHED", required_skills=("Python",))
    insert_job(db, company_id, "Draft Engineer", "DRAFT", required_skills=("Python",))
    ai._configured = False

    response = client.post("/api/match-jobs", json=RESUME.model_dump(by_alias=True), headers=headers)

    assert response.status_code == 200
    assert [j["title"] for j in response.json()["jobs"]] == ["Backend Engineer"]


def test_match_jobs_model_failure(client, ai, db, individual):
    _, headers = individual
    insert_job(db, insert_company(db))
    ai.responses.append(ExternalServiceError("AI request failed"))

    response = client.post("/api/match-jobs", json=RESUME.model_dump(by_alias=True), headers=headers)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to match jobs"


def setup_applications(client, db, settings, company_id):
    job_id = insert_job(db, company_id)
    for name in ("First", "Second"):
        user_id = insert_user(db)
        insert_resume(db, user_id, name, skills=[{"name": "Python"}])
        client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=auth_headers(settings, user_id))
    return job_id


def test_match_candidates_stores_scores(client, ai, db, settings, company_user):
    company_id, _, headers = company_user
    job_id = setup_applications(client, db, settings, company_id)
    ai.responses.extend(['{"finalScore": 81}', '{"finalScore": 64}'])

    response = client.post("/api/match-candidates", json={"jobId": str(job_id)}, headers=headers)

    assert response.status_code == 200
    assert sorted(a["matching_score"] for a in response.json()["data"]) == [64, 81]
    with db.session() as s:
        stored = s.execute(select(job_applications.c.matching_score)).scalars().all()
    assert sorted(stored) == [64, 81]


def test_match_candidates_keeps_failed_applications(client, ai, db, settings, company_user):
    company_id, _, headers = company_user
    job_id = setup_applications(client, db, settings, company_id)
    ai.responses.extend(["not a score", '{"finalScore": 70}'])

    data = client.post("/api/match-candidates", json={"jobId": str(job_id)}, headers=headers).json()["data"]

    assert sorted(a["matching_score"] for a in data if a["matching_score"] is not None) == [70]
    assert len(data) == 2


def test_match_candidates_other_company_job(client, db, company_user):
    _, _, headers = company_user
    job_id = insert_job(db, insert_company(db, "Other Co"))
    response = client.post("/api/match-candidates", json={"jobId": str(job_id)}, headers=headers)
    assert response.status_code == 404


def test_match_candidates_requires_job_id(client, company_user):
    _, _, headers = company_user
    assert client.post("/api/match-candidates", json={}, headers=headers).status_code == 400


def test_match_candidates_individual(client, db, individual):
    _, headers = individual
    job_id = insert_job(db, insert_company(db))
    assert client.post("/api/match-candidates", json={"jobId": str(job_id)}, headers=headers).status_code == 401
