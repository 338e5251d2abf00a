"""
Authentication Utility - Supabase sessions and user roles.

Provides:
- Supabase access token verification (python-jose, project JWT secret)
- Session refresh through the auth service when the access token expired
- FastAPI dependencies for protected routes
- User profile lookup and lazy creation
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jobboard.api.deps import get_db
from jobboard.core.config import Settings
from jobboard.core.errors import APIError, Unauthorized
from jobboard.db.postgres import Database
from jobboard.db.tables import users
from jobboard.schemas.schemas import AuthSession, UserProfile, UserType
from jobboard.services.auth_client import SupabaseAuthClient

log = logging.getLogger(__name__)

ACCESS_COOKIE = "sb-access-token"
REFRESH_COOKIE = "sb-refresh-token"
REFRESH_COOKIE_MAX_AGE = 60 * 60 * 24 * 30

# Header tokens take precedence over the cookie; a missing header is not an error
bearer_scheme = HTTPBearer(auto_error=False)

_UNRESOLVED = object()


def create_access_token(
    user_id: str,
    email: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a Supabase-style access token (used by scripts and tests)."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode = {
        "sub": user_id,
        "email": email,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)


class SessionManager:
    """
    Resolves the caller's session from cookies or a bearer header.

    Access tokens are verified locally. An expired access token is exchanged
    through the auth service when a refresh token is available; the returned
    session is then flagged `refreshed` so the new tokens get written back.
    """

    def __init__(self, settings: Settings, auth_client: SupabaseAuthClient):
        self.settings = settings
        self.auth_client = auth_client

    def decode(self, token: str) -> dict:
        return jwt.decode(
            token,
            self.settings.supabase_jwt_secret,
            algorithms=[self.settings.jwt_algorithm],
            audience=self.settings.jwt_audience,
        )

    def _build(self, claims: dict, access_token: str, refresh_token: Optional[str], refreshed: bool) -> Optional[AuthSession]:
        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            return None
        return AuthSession(
            user_id=user_id,
            email=claims.get("email") or "",
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=claims.get("exp"),
            refreshed=refreshed,
        )

    def resolve(self, access_token: Optional[str], refresh_token: Optional[str]) -> Optional[AuthSession]:
        if access_token:
            try:
                return self._build(self.decode(access_token), access_token, refresh_token, refreshed=False)
            except ExpiredSignatureError:
                log.debug("Access token expired, attempting refresh")
            except JWTError as e:
                log.info("Rejected access token: %s", e)
                return None

        if not refresh_token:
            return None

        try:
            payload = self.auth_client.refresh_session(refresh_token)
            new_access = payload["access_token"]
            claims = self.decode(new_access)
        except (APIError, KeyError, JWTError) as e:
            log.warning("Session refresh failed: %s", e)
            return None

        return self._build(claims, new_access, payload.get("refresh_token", refresh_token), refreshed=True)

    async def from_request(self, request: Request) -> Optional[AuthSession]:
        access_token = request.cookies.get(ACCESS_COOKIE)
        credentials = await bearer_scheme(request)
        if credentials is not None:
            access_token = credentials.credentials
        return await run_in_threadpool(self.resolve, access_token, request.cookies.get(REFRESH_COOKIE))


def set_session_cookies(response: Response, session: Optional[AuthSession], secure: bool = True) -> None:
    """Write refreshed tokens back to the browser."""
    if session is None or not session.refreshed:
        return
    response.set_cookie(ACCESS_COOKIE, session.access_token, httponly=True, samesite="lax", secure=secure, path="/")
    if session.refresh_token:
        response.set_cookie(
            REFRESH_COOKIE, session.refresh_token,
            max_age=REFRESH_COOKIE_MAX_AGE, httponly=True, samesite="lax", secure=secure, path="/"
        )


# ============================================================
# USER PROFILES
# ============================================================

def load_user_profile(s: Session, user_id: UUID) -> Optional[UserProfile]:
    row = s.execute(
        select(users.c.id, users.c.email, users.c.user_type, users.c.company_id)
        .where(users.c.id == user_id)
    ).first()
    if row is None:
        return None
    return UserProfile(**row._mapping)


def lookup_user_type(db: Database, session: AuthSession) -> UserType:
    """
    Role used for page routing.

    Any failure (no profile row, database error, unknown value) falls back to
    `individual`, the role with the fewest page permissions. Table policies are
    unaffected by this default.
    """
    try:
        with db.session(session.claims) as s:
            profile = load_user_profile(s, session.user_id)
    except Exception as e:
        log.warning("user_type lookup failed for %s, routing as individual: %s", session.user_id, e)
        return UserType.individual

    if profile is None:
        log.warning("No profile row for %s, routing as individual", session.user_id)
        return UserType.individual
    return profile.user_type


def ensure_user_row(s: Session, session: AuthSession) -> UserProfile:
    """Return the caller's profile, creating a minimal individual row if missing."""
    profile = load_user_profile(s, session.user_id)
    if profile is not None:
        return profile

    log.info("Creating user in users table: %s", session.user_id)
    s.execute(users.insert().values(
        id=session.user_id,
        email=session.email,
        user_type=UserType.individual.value,
    ))
    return UserProfile(id=session.user_id, email=session.email)


# ============================================================
# FASTAPI DEPENDENCIES
# ============================================================

def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


async def get_optional_session(request: Request) -> Optional[AuthSession]:
    """
    FastAPI dependency - caller's session or None.

    The route gate resolves the session first and leaves it on request.state;
    paths the gate skips resolve it here.
    """
    session = getattr(request.state, "session", _UNRESOLVED)
    if session is not _UNRESOLVED:
        return session
    session = await get_session_manager(request).from_request(request)
    request.state.session = session
    return session


async def require_session(session: Optional[AuthSession] = Depends(get_optional_session)) -> AuthSession:
    """
    FastAPI dependency - Get current authenticated session.

    Usage:
        @router.get("/protected")
        async def route(session: AuthSession = Depends(require_session)):
            return session
    """
    if session is None:
        raise Unauthorized("Unauthorized")
    return session


def require_company(
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db)
) -> UserProfile:
    """Dependency - Require company role with a company_id."""
    with db.session(session.claims) as s:
        profile = load_user_profile(s, session.user_id)

    if profile is None or profile.user_type != UserType.company or profile.company_id is None:
        raise Unauthorized("Company account required")
    return profile
