"""
Setup endpoints guarded by the service-role key.
"""
from sqlalchemy import func, select

from conftest import SERVICE_KEY
from jobboard.db.tables import REQUIRED_TABLES, companies, job_postings
from jobboard.services.bootstrap_service import (
    FIXTURE_COMPANY, FIXTURE_JOBS, access_policy_sql, application_status_constraint_sql
)

ADMIN = {"X-Service-Key": SERVICE_KEY}


def test_admin_endpoints_need_service_key(client, storage):
    assert client.get("/api/create-storage-bucket").status_code == 401
    assert client.get("/api/create-storage-bucket", headers={"X-Service-Key": "guess"}).status_code == 401
    assert client.post("/api/seed-jobs").status_code == 401
    assert storage.created == []


def test_bucket_creation_is_idempotent(client, storage):
    first = client.get("/api/create-storage-bucket", headers=ADMIN)
    second = client.get("/api/create-storage-bucket", headers=ADMIN)

    assert first.json() == {"success": True, "message": "Resumes bucket created successfully"}
    assert second.json()["message"] == "Resumes bucket already exists"
    assert second.json()["buckets"] == [{"id": "resumes", "name": "resumes"}]
    assert len(storage.created) == 1


def test_check_and_create_tables(client, db):
    with db.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE job_applications")

    body = client.get("/api/check-and-create-tables", headers=ADMIN).json()

    assert body["createdTables"] == ["job_applications"]
    assert "job_applications" not in body["existingTables"]

    body = client.get("/api/check-and-create-tables", headers=ADMIN).json()
    assert body["createdTables"] == []
    assert body["message"] == "All tables exist"
    assert body["policiesApplied"] is False


def test_access_policy_sql_covers_every_table():
    statements = access_policy_sql()

    for table in REQUIRED_TABLES:
        assert f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY" in statements
        assert f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}" in statements

    published = [s for s in statements if s.startswith('CREATE POLICY "Public can view published jobs"')]
    assert published == [
        'CREATE POLICY "Public can view published jobs" ON job_postings FOR SELECT USING (status = \'PUBLISHED\')'
    ]


def test_access_policies_are_dropped_before_create():
    statements = access_policy_sql()
    creates = [s for s in statements if s.startswith("CREATE POLICY")]

    assert creates
    for create in creates:
        name, table = create.split('"')[1], create.split(" ON ")[1].split()[0]
        drop = f'DROP POLICY IF EXISTS "{name}" ON {table}'
        assert statements.index(drop) == statements.index(create) - 1


def test_seed_jobs_once(client, db):
    first = client.post("/api/seed-jobs", headers=ADMIN).json()
    second = client.post("/api/seed-jobs", headers=ADMIN).json()

    assert len(first["jobs"]) == len(FIXTURE_JOBS)
    assert second["message"] == "Test jobs already exist"

    with db.session() as s:
        assert s.execute(select(func.count()).select_from(companies)).scalar() == 1
        assert s.execute(select(func.count()).select_from(job_postings)).scalar() == len(FIXTURE_JOBS)
        name = s.execute(select(companies.c.name)).scalar()
    assert name == FIXTURE_COMPANY["name"]

    # Seeded postings are published and listed publicly
    assert len(client.get("/api/jobs", params={"status": "open", "limit": 100}).json()["jobs"]) == len(FIXTURE_JOBS)


def test_status_constraint_needs_postgres(client):
    response = client.post("/api/update-application-status-constraint", headers=ADMIN)
    assert response.status_code == 500
    assert response.json()["error"] == "Constraint migration requires PostgreSQL"


def test_status_constraint_sql_includes_waitlist():
    add = application_status_constraint_sql()[-1]
    assert "'WAITLIST'" in add
    assert "'NEW'" in add


def test_check_env_reports_presence_only(client, settings):
    body = client.get("/api/check-env").json()

    assert body["hasServiceRoleKey"] is True
    assert body["hasOpenAIKey"] is False
    assert SERVICE_KEY not in str(body)


def test_health(client):
    body = client.get("/health").json()
    assert body["database"] == "connected"
