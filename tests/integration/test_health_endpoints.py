"""
Health and access endpoint integration coverage.
"""
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from brigade.api.dependencies import require_tier
from brigade.core.exceptions import BrigadeAppException
from brigade.main import brigade_app_exception_handler
from brigade.models.user import User
from tests.integration.helpers import API, EndpointCase, assert_status_for_cases


def test_health_reports_database(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["record_store"] == "database"
    assert "x-request-id" in response.headers


def test_access_routes_require_authentication(client):
    cases = [
        EndpointCase("GET", "/access/check", params={"required_tier": "free"}),
        EndpointCase("GET", "/access/features"),
    ]
    assert_status_for_cases(client, cases, 401)


def test_access_check(client, user_factory, auth_headers):
    headers = auth_headers(user_factory(tier="brigade"))

    allowed = client.get(f"{API}/access/check", params={"required_tier": "free"}, headers=headers)
    assert allowed.json() == {"has_access": True, "user_tier": "brigade", "required_tier": "free"}

    denied = client.get(f"{API}/access/check", params={"required_tier": "guild"}, headers=headers)
    assert denied.json()["has_access"] is False


def test_unknown_user_tier_fails_closed(client, user_factory, auth_headers):
    headers = auth_headers(user_factory(tier="platinum"))
    response = client.get(f"{API}/access/check", params={"required_tier": "free"}, headers=headers)
    assert response.json()["has_access"] is False


def test_feature_map(client, user_factory, auth_headers):
    features = client.get(f"{API}/access/features", headers=auth_headers(user_factory(tier="fraternity"))).json()
    assert features["qa_sessions"] is True
    assert features["masterminds"] is False


def test_require_tier_dependency(db_session, user_factory, auth_headers):
    """Routes gated by require_tier answer 403 below the required tier."""
    gated = FastAPI()
    gated.add_exception_handler(BrigadeAppException, brigade_app_exception_handler)

    @gated.get("/deep-dives")
    async def deep_dives(user: Annotated[User, Depends(require_tier("fraternity"))]):
        return {"tier": user.tier}

    with TestClient(gated) as gated_client:
        low = gated_client.get("/deep-dives", headers=auth_headers(user_factory(tier="brigade")))
        high = gated_client.get("/deep-dives", headers=auth_headers(user_factory(tier="guild")))

    assert low.status_code == 403
    assert low.json()["error"] == "InsufficientTierError"
    assert high.json() == {"tier": "guild"}
