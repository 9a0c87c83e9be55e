# =============================================================================
# tests/test_auth_guard.py - Auth Guard Tests
# =============================================================================
# Tests for get_current_user on the protected /api/auth routes.
# =============================================================================

import base64
import json
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.testclient import TestClient

import app.auth.dependencies as guard
from app.auth import AuthUser, get_current_user
from app.config import Settings
from app.envelope import EnvelopeRoute, register_exception_handlers
from app.main import create_app
from tests.conftest import TEST_SECRET, auth_header


def _unauthorized(message):
    return {"code": 401, "message": message, "data": None}


# =============================================================================
# Guard Behaviour on the Real App
# =============================================================================

class TestProtectedRoutes:

    def test_missing_token(self, client):
        response = client.get("/api/auth/profile")

        assert response.status_code == 200
        assert response.json() == _unauthorized("No token provided")

    def test_non_bearer_scheme(self, client):
        response = client.get("/api/auth/profile", headers={"Authorization": "Basic abc"})

        assert response.json() == _unauthorized("No token provided")

    def test_expired_token(self, client, register_user, make_token):
        user = register_user()
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        token = make_token(user["id"], now=issued)

        response = client.get("/api/auth/profile", headers=auth_header(token))

        assert response.json() == _unauthorized("Token has expired")

    def test_garbage_token(self, client):
        response = client.get("/api/auth/profile", headers=auth_header("not-a-token"))

        assert response.json() == _unauthorized("Token is invalid")

    def test_wrong_secret(self, client, make_token):
        token = make_token(1, secret="some-other-secret-0123456789")

        response = client.get("/api/auth/verify", headers=auth_header(token))

        assert response.json() == _unauthorized("Token is invalid")

    def test_tampered_payload(self, client, register_user):
        user = register_user()
        header, _, signature = user["token"].split(".")
        forged = base64.urlsafe_b64encode(
            json.dumps({"sub": "999", "email": "evil@x.com", "exp": 9999999999}).encode()
        ).rstrip(b"=").decode()

        response = client.get(
            "/api/auth/verify", headers=auth_header(f"{header}.{forged}.{signature}")
        )

        assert response.json() == _unauthorized("Token is invalid")

    def test_non_numeric_subject(self, client, make_token):
        token = make_token("abc")

        response = client.get("/api/auth/verify", headers=auth_header(token))

        assert response.json() == _unauthorized("Token is invalid")

    def test_valid_token(self, client, register_user):
        user = register_user()

        response = client.get("/api/auth/verify", headers=auth_header(user["token"]))

        assert response.json() == {
            "code": 0,
            "message": "success",
            "data": {"valid": True, "userId": user["id"], "email": "a@x.com"},
        }

    def test_unexpected_failure_is_internal_error(self, client, make_token, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(guard, "verify_token", explode)

        response = client.get("/api/auth/verify", headers=auth_header(make_token()))

        assert response.json() == {"code": 500, "message": "服务器异常", "data": None}

    def test_token_verified_once_per_request(self, client, register_user, monkeypatch):
        """Router-wide and per-route guards share one cached resolution."""
        user = register_user()
        calls = []
        real_verify = guard.verify_token

        def counting_verify(*args, **kwargs):
            calls.append(1)
            return real_verify(*args, **kwargs)

        monkeypatch.setattr(guard, "verify_token", counting_verify)

        client.get("/api/auth/profile", headers=auth_header(user["token"]))

        assert len(calls) == 1

    def test_mirror_mode_returns_401(self, settings):
        settings = settings.model_copy(update={"ENVELOPE_STATUS_MODE": "mirror_code"})

        with TestClient(create_app(settings)) as mirror_client:
            response = mirror_client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json()["code"] == 401


# =============================================================================
# Guard in Isolation
# =============================================================================

def build_guarded_app():
    app = FastAPI()
    app.state.settings = Settings(DATABASE_URL="sqlite://", JWT_SECRET=TEST_SECRET)
    app.state.calls = []
    register_exception_handlers(app)

    router = APIRouter(route_class=EnvelopeRoute, dependencies=[Depends(get_current_user)])

    @router.get("/whoami")
    async def whoami(request: Request):
        app.state.calls.append(request.state.user)
        return {"id": request.state.user.id}

    app.include_router(router)
    return app


class TestGuardIsolated:

    def test_sets_request_state_user(self, make_token):
        app = build_guarded_app()

        response = TestClient(app).get("/whoami", headers=auth_header(make_token(5)))

        assert response.json()["data"] == {"id": 5}
        assert app.state.calls == [AuthUser(id=5, email="a@x.com")]

    def test_rejected_request_never_reaches_handler(self):
        app = build_guarded_app()

        response = TestClient(app).get("/whoami")

        assert response.json()["code"] == 401
        assert app.state.calls == []
