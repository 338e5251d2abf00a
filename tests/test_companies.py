"""
Company sign-up.
"""
import uuid

from sqlalchemy import select

from conftest import auth_headers
from jobboard.db.tables import users


def test_company_sign_up(client, db, settings):
    user_id = uuid.uuid4()
    headers = auth_headers(settings, user_id, "founder@startup.example")

    response = client.post(
        "/api/companies",
        json={"name": "Startup", "industry": "Software", "location": "Remote"},
        headers=headers,
    )

    assert response.status_code == 201
    company = response.json()["company"]
    assert company["name"] == "Startup"

    with db.session() as s:
        user = s.execute(select(users).where(users.c.id == user_id)).one()
    assert user.user_type == "company"
    assert str(user.company_id) == company["id"]

    # The new company account can now use company endpoints
    assert client.get("/api/company/jobs", headers=headers).status_code == 200


def test_second_company_rejected(client, company_user):
    _, _, headers = company_user
    response = client.post("/api/companies", json={"name": "Another"}, headers=headers)
    assert response.status_code == 400


def test_company_name_required(client, individual):
    _, headers = individual
    assert client.post("/api/companies", json={}, headers=headers).status_code == 400


def test_company_sign_up_without_session(client):
    assert client.post("/api/companies", json={"name": "Nope"}).status_code == 401
