"""
Table definitions (SQLAlchemy Core).

The same MetaData is used to build queries, to create missing tables from the
admin endpoint, and to build the SQLite database in tests. CHECK constraints
are generated from the API enums so the database and the validators agree.

Column types degrade gracefully off PostgreSQL:
- JSONB -> JSON
- TEXT[] -> JSON list
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import (
    JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, MetaData,
    Numeric, Table, Text, Uuid
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from jobboard.schemas.schemas import ApplicationStatus, JobStatus, JobType, UserType

metadata = MetaData()

JSONDocument = JSON().with_variant(JSONB(), "postgresql")
TextList = JSON().with_variant(ARRAY(Text), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_check_sql(column: str, enum_cls: Type[Enum]) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


def _timestamps():
    return (
        Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
        Column("updated_at", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow),
    )


companies = Table(
    "companies", metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("website", Text),
    Column("industry", Text),
    Column("size", Text),
    Column("location", Text),
    *_timestamps(),
)

# id mirrors the auth user id, so there is no default
users = Table(
    "users", metadata,
    Column("id", Uuid, primary_key=True),
    Column("email", Text, nullable=False, unique=True),
    Column("user_type", Text, nullable=False, default=UserType.individual.value),
    Column("company_id", Uuid, ForeignKey("companies.id")),
    *_timestamps(),
    CheckConstraint(enum_check_sql("user_type", UserType), name="user_type_check"),
)

resumes = Table(
    "resumes", metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("user_id", Uuid, ForeignKey("users.id"), nullable=False),
    Column("content", JSONDocument, nullable=False),
    Column("feedback", JSONDocument),
    *_timestamps(),
)

job_postings = Table(
    "job_postings", metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("required_skills", TextList, nullable=False, default=list),
    Column("location", Text, nullable=False),
    Column("job_type", Text, nullable=False),
    Column("salary_range", Text),
    Column("company_id", Uuid, ForeignKey("companies.id"), nullable=False),
    Column("status", Text, nullable=False, default=JobStatus.draft.value),
    *_timestamps(),
    CheckConstraint(enum_check_sql("job_type", JobType), name="job_type_check"),
    CheckConstraint(enum_check_sql("status", JobStatus), name="status_check"),
)

Index("idx_job_postings_company", job_postings.c.company_id)
Index("idx_job_postings_status", job_postings.c.status)

job_applications = Table(
    "job_applications", metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("job_id", Uuid, ForeignKey("job_postings.id"), nullable=False),
    Column("applicant_id", Uuid, ForeignKey("users.id"), nullable=False),
    Column("resume_url", Text, nullable=False),
    Column("cover_letter_url", Text),
    Column("status", Text, nullable=False, default=ApplicationStatus.new.value),
    Column("matching_score", Numeric(asdecimal=False)),
    *_timestamps(),
    CheckConstraint(enum_check_sql("status", ApplicationStatus), name="status_check"),
)

Index("idx_job_applications_job", job_applications.c.job_id)
Index("idx_job_applications_applicant", job_applications.c.applicant_id)
Index("idx_job_applications_status", job_applications.c.status)

# Creation order respects foreign keys
REQUIRED_TABLES = ["companies", "users", "resumes", "job_postings", "job_applications"]
