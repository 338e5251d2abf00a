"""
Route gate - page access by session and user role.

Every request outside the excluded prefixes passes through here. The gate
resolves (and if needed refreshes) the session, looks up the role only when
the path depends on it, and then either lets the request through or
redirects. Refreshed tokens are written back on whatever response leaves.

Policy, in order:
1. signed in  + auth page                  -> role dashboard
2. signed out + protected page             -> /auth/sign-in
3. signed in  + company page, not company  -> /dashboard
4. signed in  + company + individual page  -> /company/dashboard
5. otherwise                               -> allow
"""

from typing import NamedTuple, Optional

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from jobboard.core.auth import lookup_user_type, set_session_cookies
from jobboard.schemas.schemas import UserType

SIGN_IN_PATH = "/auth/sign-in"

EXCLUDED_PREFIXES = ("/_next/static", "/_next/image", "/favicon.ico", "/assets", "/api/auth/callback")

AUTH_ONLY_PREFIXES = ("/auth/sign-in", "/auth/sign-up", "/auth/company-sign-up")

PROTECTED_PREFIXES = (
    "/dashboard", "/company/", "/resume-builder", "/resume-upload",
    "/cover-letter", "/templates", "/profile", "/employer",
)

COMPANY_ONLY_PREFIXES = ("/company/", "/employer/")

INDIVIDUAL_ONLY_PREFIXES = ("/resume-builder", "/resume-upload", "/cover-letter", "/templates", "/profile")
INDIVIDUAL_ONLY_EXACT = ("/dashboard",)

DASHBOARDS = {
    UserType.individual: "/dashboard",
    UserType.company: "/company/dashboard",
}


class GateDecision(NamedTuple):
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None


ALLOW = GateDecision()


def dashboard_for(user_type: UserType) -> str:
    return DASHBOARDS[user_type]


def applies_to(path: str) -> bool:
    return not path.startswith(EXCLUDED_PREFIXES)


def _individual_only(path: str) -> bool:
    return path in INDIVIDUAL_ONLY_EXACT or path.startswith(INDIVIDUAL_ONLY_PREFIXES)


def needs_role(path: str) -> bool:
    """True when the decision for a signed-in caller depends on user_type."""
    return (
        path.startswith(AUTH_ONLY_PREFIXES)
        or path.startswith(COMPANY_ONLY_PREFIXES)
        or _individual_only(path)
    )


def decide_route(path: str, authenticated: bool, user_type: Optional[UserType] = None) -> GateDecision:
    """
    Pure policy decision.

    user_type is only consulted for signed-in callers; None is routed as
    individual.
    """
    role = user_type or UserType.individual

    if authenticated and path.startswith(AUTH_ONLY_PREFIXES):
        return GateDecision(dashboard_for(role))

    if not authenticated:
        if path.startswith(PROTECTED_PREFIXES):
            return GateDecision(SIGN_IN_PATH)
        return ALLOW

    if path.startswith(COMPANY_ONLY_PREFIXES) and role != UserType.company:
        return GateDecision(dashboard_for(UserType.individual))

    if role == UserType.company and _individual_only(path):
        return GateDecision(dashboard_for(UserType.company))

    return ALLOW


def register_route_gate(app: FastAPI) -> None:
    @app.middleware("http")
    async def route_gate(request: Request, call_next):
        path = request.url.path
        if not applies_to(path):
            return await call_next(request)

        state = request.app.state
        session = await state.session_manager.from_request(request)
        request.state.session = session

        user_type = None
        if session is not None and needs_role(path):
            user_type = await run_in_threadpool(lookup_user_type, state.database, session)

        decision = decide_route(path, session is not None, user_type)
        if decision.allowed:
            response = await call_next(request)
        else:
            response = RedirectResponse(decision.redirect_to, status_code=307)

        set_session_cookies(response, session, secure=not state.settings.debug)
        return response
