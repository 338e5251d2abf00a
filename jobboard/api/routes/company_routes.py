"""
Company Routes

POST /companies - Company sign-up: create the company and make the caller
                  a company user
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from jobboard.api.deps import get_db
from jobboard.core.auth import ensure_user_row, require_session
from jobboard.core.errors import ExternalServiceError, ValidationFailed
from jobboard.db.postgres import Database
from jobboard.db.tables import companies, users
from jobboard.schemas.schemas import AuthSession, CompanyCreate, UserType

log = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post("", status_code=201)
def create_company(
    data: CompanyCreate,
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
):
    """Create a company and link the caller to it as a company user."""
    try:
        with db.session(session.claims) as s:
            profile = ensure_user_row(s, session)
            if profile.company_id is not None:
                raise ValidationFailed("Company profile already exists")

            company = s.execute(
                companies.insert().values(**data.model_dump()).returning(*companies.c)
            ).one()

            s.execute(
                users.update()
                .where(users.c.id == session.user_id)
                .values(user_type=UserType.company.value, company_id=company.id)
            )
    except SQLAlchemyError as e:
        raise ExternalServiceError("Failed to create company", details=str(e))

    log.info("Company %s created by %s", company.id, session.user_id)
    return {"company": dict(company._mapping), "success": True}
