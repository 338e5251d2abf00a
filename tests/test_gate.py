"""
Route gate: pure policy and the middleware around it.
"""
from datetime import timedelta

import pytest

from conftest import auth_headers, insert_company, insert_user
from jobboard.core.auth import ACCESS_COOKIE, REFRESH_COOKIE, create_access_token
from jobboard.core.gate import SIGN_IN_PATH, decide_route, needs_role
from jobboard.schemas.schemas import UserType


# ============================================================
# POLICY
# ============================================================

@pytest.mark.parametrize("path,authenticated,user_type,expected", [
    # Signed in on an auth page -> role dashboard
    ("/auth/sign-in", True, UserType.individual, "/dashboard"),
    ("/auth/sign-up", True, UserType.company, "/company/dashboard"),
    ("/auth/company-sign-up", True, None, "/dashboard"),
    # Signed out on a protected page -> sign in
    ("/dashboard", False, None, SIGN_IN_PATH),
    ("/company/jobs", False, None, SIGN_IN_PATH),
    ("/resume-builder/new", False, None, SIGN_IN_PATH),
    ("/employer/settings", False, None, SIGN_IN_PATH),
    # Company pages need a company account
    ("/company/dashboard", True, UserType.individual, "/dashboard"),
    ("/employer/jobs", True, UserType.individual, "/dashboard"),
    # Company accounts stay out of individual pages
    ("/dashboard", True, UserType.company, "/company/dashboard"),
    ("/cover-letter", True, UserType.company, "/company/dashboard"),
    ("/profile", True, UserType.company, "/company/dashboard"),
])
def test_redirects(path, authenticated, user_type, expected):
    assert decide_route(path, authenticated, user_type).redirect_to == expected


@pytest.mark.parametrize("path,authenticated,user_type", [
    ("/", False, None),
    ("/jobs", False, None),
    ("/auth/sign-in", False, None),
    ("/dashboard", True, UserType.individual),
    ("/company/dashboard", True, UserType.company),
    ("/resume-builder", True, UserType.individual),
    # Only the exact /dashboard path is individual-only
    ("/dashboard/settings", True, UserType.company),
])
def test_allowed(path, authenticated, user_type):
    assert decide_route(path, authenticated, user_type).allowed


def test_missing_role_routes_as_individual():
    assert decide_route("/company/dashboard", True, None).redirect_to == "/dashboard"


def test_role_lookup_only_for_role_dependent_paths():
    assert needs_role("/company/dashboard")
    assert needs_role("/auth/sign-in")
    assert needs_role("/dashboard")
    assert not needs_role("/jobs")
    assert not needs_role("/api/jobs")


# ============================================================
# MIDDLEWARE
# ============================================================

def test_signed_out_protected_page_redirects(client):
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == SIGN_IN_PATH


def test_individual_sent_away_from_company_pages(client, individual):
    _, headers = individual
    response = client.get("/company/dashboard", headers=headers, follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"


def test_company_sent_to_company_dashboard(client, company_user):
    _, _, headers = company_user
    response = client.get("/auth/sign-in", headers=headers, follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/company/dashboard"


def test_user_without_profile_row_routes_as_individual(client, settings):
    headers = auth_headers(settings, "6f1c1d0e-8d4a-4d8c-9a51-1d7c3f3b2a10")
    response = client.get("/company/dashboard", headers=headers, follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"


def test_allowed_request_reaches_the_app(client, company_user):
    _, _, headers = company_user
    response = client.get("/health", headers=headers, follow_redirects=False)
    assert response.status_code == 200


def test_excluded_paths_skip_the_gate(client, auth_client):
    client.cookies.set(REFRESH_COOKIE, "refresh-me")
    response = client.get("/favicon.ico", follow_redirects=False)
    assert response.status_code == 404
    assert auth_client.calls == []


# ============================================================
# SESSION REFRESH
# ============================================================

def test_expired_session_is_refreshed_and_written_back(client, settings, auth_client, db):
    company_id = insert_company(db)
    user_id = insert_user(db, "company", company_id, email="hr@acme.example")

    expired = create_access_token(str(user_id), "hr@acme.example", settings, expires_delta=timedelta(minutes=-5))
    fresh = create_access_token(str(user_id), "hr@acme.example", settings)
    auth_client.sessions["old-refresh"] = {"access_token": fresh, "refresh_token": "new-refresh"}

    client.cookies.set(ACCESS_COOKIE, expired)
    client.cookies.set(REFRESH_COOKIE, "old-refresh")
    response = client.get("/company/dashboard", follow_redirects=False)

    # Refreshed session is a company session, so the page is allowed
    assert response.status_code == 404
    assert auth_client.calls == ["old-refresh"]
    set_cookie = "\n".join(response.headers.get_list("set-cookie"))
    assert f"{ACCESS_COOKIE}={fresh}" in set_cookie
    assert f"{REFRESH_COOKIE}=new-refresh" in set_cookie
    assert "HttpOnly" in set_cookie


def test_refresh_cookies_written_on_redirects_too(client, settings, auth_client, individual):
    user_id, _ = individual
    expired = create_access_token(str(user_id), "jane@example.com", settings, expires_delta=timedelta(minutes=-5))
    fresh = create_access_token(str(user_id), "jane@example.com", settings)
    auth_client.sessions["r1"] = {"access_token": fresh, "refresh_token": "r2"}

    client.cookies.set(ACCESS_COOKIE, expired)
    client.cookies.set(REFRESH_COOKIE, "r1")
    response = client.get("/auth/sign-in", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"
    assert f"{REFRESH_COOKIE}=r2" in "\n".join(response.headers.get_list("set-cookie"))


def test_failed_refresh_counts_as_signed_out(client, settings, auth_client, individual):
    user_id, _ = individual
    expired = create_access_token(str(user_id), "jane@example.com", settings, expires_delta=timedelta(minutes=-5))

    client.cookies.set(ACCESS_COOKIE, expired)
    client.cookies.set(REFRESH_COOKIE, "revoked")
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == SIGN_IN_PATH
    assert "set-cookie" not in response.headers


def test_valid_session_writes_no_cookies(client, individual):
    _, headers = individual
    response = client.get("/dashboard", headers=headers, follow_redirects=False)
    assert response.status_code == 404
    assert "set-cookie" not in response.headers
