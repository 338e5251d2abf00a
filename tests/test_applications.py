"""
Applying to jobs and reviewing applications.
"""
import uuid

from sqlalchemy import func, select

from conftest import auth_headers, insert_company, insert_job, insert_resume, insert_user, minutes_ago
from jobboard.db.tables import job_applications, users


def count_applications(db):
    with db.session() as s:
        return s.execute(select(func.count()).select_from(job_applications)).scalar()


# ============================================================
# APPLY
# ============================================================

def test_apply_with_latest_resume(client, db, individual):
    user_id, headers = individual
    job_id = insert_job(db, insert_company(db))
    insert_resume(db, user_id, "Old", created_at=minutes_ago(20))
    latest = insert_resume(db, user_id, "New", created_at=minutes_ago(1))

    response = client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["application"]["status"] == "NEW"
    assert body["application"]["resume_url"] == f"/api/resumes/{latest}"


def test_apply_with_selected_resume(client, db, individual):
    user_id, headers = individual
    job_id = insert_job(db, insert_company(db))
    chosen = insert_resume(db, user_id, created_at=minutes_ago(20))
    insert_resume(db, user_id, created_at=minutes_ago(1))

    response = client.post(
        "/api/apply-job", json={"jobId": str(job_id), "resumeId": str(chosen)}, headers=headers
    )
    assert response.json()["application"]["resume_url"] == f"/api/resumes/{chosen}"


def test_apply_with_someone_elses_resume(client, db, individual):
    _, headers = individual
    job_id = insert_job(db, insert_company(db))
    other_resume = insert_resume(db, insert_user(db))

    response = client.post(
        "/api/apply-job", json={"jobId": str(job_id), "resumeId": str(other_resume)}, headers=headers
    )
    assert response.status_code == 400
    assert count_applications(db) == 0


def test_apply_without_any_resume(client, db, individual):
    _, headers = individual
    job_id = insert_job(db, insert_company(db))

    response = client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Please create a resume before applying to jobs"


def test_apply_with_external_resume_url_creates_user_row(client, db, settings):
    user_id = uuid.uuid4()
    headers = auth_headers(settings, user_id, "fresh@example.com")
    job_id = insert_job(db, insert_company(db))

    response = client.post(
        "/api/apply-job",
        json={"jobId": str(job_id), "resumeUrl": "https://files.example/cv.pdf"},
        headers=headers,
    )

    assert response.status_code == 200
    with db.session() as s:
        row = s.execute(select(users).where(users.c.id == user_id)).one()
    assert row.user_type == "individual"
    assert row.email == "fresh@example.com"


def test_apply_twice(client, db, individual):
    user_id, headers = individual
    job_id = insert_job(db, insert_company(db))
    insert_resume(db, user_id)

    assert client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers).status_code == 200
    response = client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "You have already applied to this job"
    assert count_applications(db) == 1


def test_apply_to_unpublished_job(client, db, individual):
    user_id, headers = individual
    insert_resume(db, user_id)
    for status in ("DRAFT", "CLOSED"):
        job_id = insert_job(db, insert_company(db), status=status)
        response = client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers)
        assert response.status_code == 400
    assert count_applications(db) == 0


def test_apply_missing_job(client, individual):
    _, headers = individual
    assert client.post("/api/apply-job", json={}, headers=headers).status_code == 400
    response = client.post("/api/apply-job", json={"jobId": str(uuid.uuid4())}, headers=headers)
    assert response.status_code == 404


def test_apply_without_session(client, db):
    job_id = insert_job(db, insert_company(db))
    response = client.post("/api/apply-job", json={"jobId": str(job_id)})
    assert response.status_code == 401
    assert count_applications(db) == 0


def test_my_applications(client, db, individual):
    user_id, headers = individual
    insert_resume(db, user_id)
    job_id = insert_job(db, insert_company(db, "Initech"), "Tester")
    client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=headers)

    body = client.get("/api/my-applications", headers=headers).json()

    assert body["success"] is True
    [application] = body["applications"]
    assert application["job_title"] == "Tester"
    assert application["company_name"] == "Initech"
    assert application["status"] == "new"


# ============================================================
# COMPANY REVIEW
# ============================================================

def apply(client, db, settings, job_id, full_name):
    user_id = insert_user(db)
    insert_resume(db, user_id, full_name)
    response = client.post("/api/apply-job", json={"jobId": str(job_id)}, headers=auth_headers(settings, user_id))
    return response.json()["application"]


def test_company_sees_applications_to_own_jobs(client, db, settings, company_user):
    company_id, _, headers = company_user
    mine = insert_job(db, company_id, "Mine")
    theirs = insert_job(db, insert_company(db, "Other Co"), "Theirs")
    apply(client, db, settings, mine, "Alice Applicant")
    apply(client, db, settings, theirs, "Bob Applicant")

    body = client.get("/api/apply-job", headers=headers).json()

    assert body["total"] == 1
    application = body["applications"][0]
    assert application["candidate_name"] == "Alice Applicant"
    assert application["job_title"] == "Mine"
    assert application["resume_id"] is not None


def test_company_filters_by_job(client, db, settings, company_user):
    company_id, _, headers = company_user
    first = insert_job(db, company_id, "First")
    second = insert_job(db, company_id, "Second")
    apply(client, db, settings, first, "A")
    apply(client, db, settings, second, "B")

    body = client.get("/api/apply-job", params={"jobId": str(second)}, headers=headers).json()
    assert [a["job_title"] for a in body["applications"]] == ["Second"]


def test_company_updates_application_status(client, db, settings, company_user):
    company_id, _, headers = company_user
    application = apply(client, db, settings, insert_job(db, company_id), "A")

    response = client.post(
        f"/api/applications/{application['id']}/status", json={"status": "WAITLIST"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["application"]["status"] == "WAITLIST"


def test_status_update_on_other_company_application(client, db, settings, company_user):
    _, _, headers = company_user
    application = apply(client, db, settings, insert_job(db, insert_company(db, "Other Co")), "A")

    response = client.post(
        f"/api/applications/{application['id']}/status", json={"status": "HIRED"}, headers=headers
    )
    assert response.status_code == 404


def test_invalid_application_status(client, db, settings, company_user):
    company_id, _, headers = company_user
    application = apply(client, db, settings, insert_job(db, company_id), "A")

    response = client.post(
        f"/api/applications/{application['id']}/status", json={"status": "MAYBE"}, headers=headers
    )
    assert response.status_code == 400
