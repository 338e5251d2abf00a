"""
Bootstrap Service - one-shot setup operations.

All of these run with service credentials (no per-user claims) and check
for existing state before creating anything.
"""

import logging
from typing import List, Tuple

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError

from jobboard.core.errors import ConfigurationError, ExternalServiceError
from jobboard.db.postgres import Database, rows_to_dicts
from jobboard.db.tables import REQUIRED_TABLES, companies, enum_check_sql, job_postings
from jobboard.schemas.schemas import ApplicationStatus, JobStatus, JobType
from jobboard.services.storage_service import SupabaseStorageClient

log = logging.getLogger(__name__)


# ============================================================
# STORAGE
# ============================================================

def ensure_resume_bucket(storage: SupabaseStorageClient, bucket: str) -> Tuple[bool, List[dict]]:
    """
    Create the resume bucket unless it already exists.

    Returns:
        (created, buckets) where buckets is the listing taken before creation
    """
    buckets = storage.list_buckets()
    if any(b.get("name") == bucket for b in buckets):
        return False, buckets

    storage.create_bucket(bucket, public=True)
    log.info("Storage bucket %r created", bucket)
    return True, buckets


# ============================================================
# FIXTURE DATA
# ============================================================

FIXTURE_COMPANY = {
    "name": "TechCorp Solutions",
    "description": "A leading technology company specializing in AI and software development",
    "industry": "Technology",
    "size": "50-200",
    "location": "San Francisco, CA",
    "website": "https://techcorp.example.com",
}

FIXTURE_JOBS = [
    {
        "title": "Senior Software Engineer",
        "description": (
            "We are looking for a Senior Software Engineer to join our team. You will be responsible "
            "for developing scalable web applications using React, Node.js, and modern technologies. "
            "Experience with cloud platforms and DevOps practices is preferred."
        ),
        "required_skills": ["JavaScript", "React", "Node.js", "MongoDB", "AWS"],
        "location": "San Francisco, CA",
        "salary_range": "$120,000 - $160,000",
    },
    {
        "title": "Frontend Developer",
        "description": (
            "Join our frontend team to build beautiful and responsive user interfaces. You will work "
            "with React, TypeScript, and modern CSS frameworks to create amazing user experiences."
        ),
        "required_skills": ["React", "TypeScript", "CSS", "HTML", "JavaScript"],
        "location": "Remote",
        "salary_range": "$80,000 - $120,000",
    },
    {
        "title": "Data Scientist",
        "description": (
            "We are seeking a Data Scientist to analyze large datasets and build machine learning "
            "models. Experience with Python, SQL, and machine learning frameworks is required."
        ),
        "required_skills": ["Python", "SQL", "Machine Learning", "TensorFlow", "Pandas"],
        "location": "New York, NY",
        "salary_range": "$100,000 - $140,000",
    },
    {
        "title": "UX Designer",
        "description": (
            "Looking for a creative UX Designer to design intuitive and engaging user experiences. "
            "You will work closely with product managers and developers to create user-centered designs."
        ),
        "required_skills": ["Figma", "Adobe Creative Suite", "User Research", "Prototyping", "Wireframing"],
        "location": "Los Angeles, CA",
        "salary_range": "$85,000 - $115,000",
    },
    {
        "title": "DevOps Engineer",
        "description": (
            "Join our DevOps team to build and maintain our cloud infrastructure. Experience with "
            "Docker, Kubernetes, and CI/CD pipelines is essential."
        ),
        "required_skills": ["Docker", "Kubernetes", "AWS", "Jenkins", "Terraform"],
        "location": "Seattle, WA",
        "salary_range": "$110,000 - $150,000",
    },
    {
        "title": "Product Manager",
        "description": (
            "We are looking for a Product Manager to drive product strategy and roadmap. You will "
            "work with cross-functional teams to deliver amazing products."
        ),
        "required_skills": ["Product Strategy", "Agile", "User Research", "Analytics", "Communication"],
        "location": "Austin, TX",
        "salary_range": "$95,000 - $130,000",
    },
]


def seed_jobs(db: Database) -> dict:
    """
    Get or create the fixture company and insert the fixture postings,
    unless that company already has postings.
    """
    try:
        with db.session() as s:
            company_id = s.execute(
                select(companies.c.id).where(companies.c.name == FIXTURE_COMPANY["name"]).limit(1)
            ).scalar()

            if company_id is None:
                company_id = s.execute(
                    companies.insert().values(**FIXTURE_COMPANY).returning(companies.c.id)
                ).scalar_one()
                log.info("Created fixture company %s", company_id)

            existing = s.execute(
                select(job_postings.c.id).where(job_postings.c.company_id == company_id)
            ).all()
            if existing:
                return {"success": True, "message": "Test jobs already exist", "count": len(existing)}

            inserted = s.execute(
                job_postings.insert().returning(job_postings.c.id, job_postings.c.title),
                [
                    {
                        **job,
                        "job_type": JobType.full_time.value,
                        "status": JobStatus.published.value,
                        "company_id": company_id,
                    }
                    for job in FIXTURE_JOBS
                ],
            )
            jobs = rows_to_dicts(inserted)
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to seed jobs", details=str(e))

    log.info("Seeded %d fixture jobs", len(jobs))
    return {"success": True, "message": "Test jobs created successfully", "jobs": jobs}


# ============================================================
# SCHEMA
# ============================================================

COMPANY_OF_CALLER = (
    "SELECT company_id FROM users WHERE id = auth.uid() AND user_type = 'company'"
)
JOBS_OF_CALLER = f"SELECT id FROM job_postings WHERE company_id IN ({COMPANY_OF_CALLER})"

# (policy name, table, command, USING clause, WITH CHECK clause)
ACCESS_POLICIES = [
    ("Public can view company profiles", "companies", "SELECT", "true", None),
    ("Signed-in users can create companies", "companies", "INSERT", None, "auth.uid() IS NOT NULL"),
    ("Users can manage their own company", "companies", "UPDATE", f"id IN ({COMPANY_OF_CALLER})", None),
    ("Users can view their own profile", "users", "SELECT", "id = auth.uid()", None),
    ("Users can create their own profile", "users", "INSERT", None, "id = auth.uid()"),
    ("Users can update their own profile", "users", "UPDATE", "id = auth.uid()", None),
    ("Users can manage their own resumes", "resumes", "ALL", "user_id = auth.uid()", None),
    ("Company members can view applicant resumes", "resumes", "SELECT",
     f"user_id IN (SELECT applicant_id FROM job_applications WHERE job_id IN ({JOBS_OF_CALLER}))", None),
    ("Public can view published jobs", "job_postings", "SELECT", f"status = '{JobStatus.published.value}'", None),
    ("Company members can manage their jobs", "job_postings", "ALL", f"company_id IN ({COMPANY_OF_CALLER})", None),
    ("Candidates can view their own applications", "job_applications", "SELECT", "applicant_id = auth.uid()", None),
    ("Candidates can create applications", "job_applications", "INSERT", None, "applicant_id = auth.uid()"),
    ("Company members can view applications for their jobs", "job_applications", "SELECT",
     f"job_id IN ({JOBS_OF_CALLER})", None),
    ("Company members can manage applications for their jobs", "job_applications", "UPDATE",
     f"job_id IN ({JOBS_OF_CALLER})", None),
]

UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = now();
  RETURN NEW;
END;
$$ LANGUAGE plpgsql
""".strip()


def access_policy_sql() -> List[str]:
    """
    Row level security for every table, plus the updated_at triggers.

    Policies and triggers are dropped before being recreated, so the
    statements can be re-run against a database that already has them.
    """
    statements = [UPDATED_AT_FUNCTION]
    for table in REQUIRED_TABLES:
        trigger = f"update_{table}_updated_at"
        statements += [
            f"DROP TRIGGER IF EXISTS {trigger} ON {table}",
            f"CREATE TRIGGER {trigger} BEFORE UPDATE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()",
            f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY",
        ]

    for name, table, command, using, check in ACCESS_POLICIES:
        create = f'CREATE POLICY "{name}" ON {table} FOR {command}'
        if using:
            create += f" USING ({using})"
        if check:
            create += f" WITH CHECK ({check})"
        statements += [f'DROP POLICY IF EXISTS "{name}" ON {table}', create]
    return statements


def apply_access_policies(db: Database) -> bool:
    """Install the policies on Postgres. Returns False on other databases."""
    if not db.is_postgres:
        log.info("Skipping row level security setup on %s", db.engine.dialect.name)
        return False

    with db.session() as s:
        for statement in access_policy_sql():
            s.execute(text(statement))
    log.info("Row level security policies applied to %d tables", len(REQUIRED_TABLES))
    return True


def check_and_create_tables(db: Database) -> dict:
    try:
        existing = db.existing_tables()
        created = db.create_missing_tables()
        policies = apply_access_policies(db)
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to create tables", details=str(e))

    return {
        "success": True,
        "existingTables": existing,
        "createdTables": created,
        "policiesApplied": policies,
        "message": "All tables exist" if not created else f"Created {len(created)} table(s)",
    }


def application_status_constraint_sql() -> List[str]:
    return [
        "ALTER TABLE job_applications DROP CONSTRAINT IF EXISTS status_check",
        "ALTER TABLE job_applications ADD CONSTRAINT status_check CHECK ("
        + enum_check_sql("status", ApplicationStatus) + ")",
    ]


def update_application_status_constraint(db: Database) -> dict:
    """Rewrite the application status CHECK constraint from ApplicationStatus."""
    if not db.is_postgres:
        raise ConfigurationError("Constraint migration requires PostgreSQL")

    log.info("Updating job_applications status constraint to include WAITLIST...")
    try:
        with db.session() as s:
            for statement in application_status_constraint_sql():
                s.execute(text(statement))
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to update status constraint", details=str(e))

    log.info("Successfully updated job_applications status constraint")
    return {"success": True, "message": "Status constraint updated to include WAITLIST"}
