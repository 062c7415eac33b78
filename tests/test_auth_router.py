from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.application.dto.auth import (
    AuthTokensOutput,
    AuthUserOutput,
    MessageOutput,
    RefreshSessionOutput,
    RegisterUserOutput,
    VerifyEmailOutput,
)
from app.application.use_cases.initiate_password_reset import RESET_REQUESTED_MESSAGE
from app.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    FederationError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.infrastructure.security.token_service import JwtTokenService
from app.main import app


PRIMARY_KEY = "router-test-primary-key-32-characters"
USER = AuthUserOutput(user_id="user-1", email="alice@example.com", email_verified=False)


class FakeUseCase:
    def __init__(self, result=None, *, error: Exception | None = None):
        self.result = result
        self.error = error
        self.commands = []

    def execute(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def token_service() -> JwtTokenService:
    return JwtTokenService(primary_key=PRIMARY_KEY, access_ttl_hours=1, refresh_ttl_hours=2)


@pytest.fixture
def client(token_service):
    app.dependency_overrides[deps.get_token_service] = lambda: token_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def override(getter, use_case: FakeUseCase) -> FakeUseCase:
    app.dependency_overrides[getter] = lambda: use_case
    return use_case


def test_register_returns_201_with_camel_case_envelope(client):
    use_case = override(
        deps.get_register_user_use_case,
        FakeUseCase(RegisterUserOutput(user=USER, message="Registration successful.")),
    )

    response = client.post("/v1/auth/register", json={"email": "alice@example.com", "password": "Passw0rd1"})

    assert response.status_code == 201
    assert response.json() == {
        "success": True,
        "data": {
            "userId": "user-1",
            "email": "alice@example.com",
            "emailVerified": False,
            "message": "Registration successful.",
        },
    }
    assert use_case.commands[0].password == "Passw0rd1"


def test_register_conflict_maps_to_409(client):
    override(
        deps.get_register_user_use_case,
        FakeUseCase(error=ConflictError("An account with this email already exists", code="EMAIL_TAKEN")),
    )

    response = client.post("/v1/auth/register", json={"email": "alice@example.com", "password": "Passw0rd1"})

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": {"code": "EMAIL_TAKEN", "message": "An account with this email already exists"},
    }


def test_register_validation_details_are_returned(client):
    details = [{"field": "password", "message": "Password must be at least 8 characters"}]
    override(
        deps.get_register_user_use_case,
        FakeUseCase(error=ValidationError("Invalid input data", details=details)),
    )

    response = client.post("/v1/auth/register", json={"email": "alice@example.com", "password": "x"})

    assert response.status_code == 400
    assert response.json()["error"]["details"] == details


def test_malformed_body_is_a_validation_error(client):
    override(deps.get_login_local_use_case, FakeUseCase())

    response = client.post("/v1/auth/login", json={"email": 123, "password": "Passw0rd1"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["field"] == "email"


def test_login_returns_tokens(client):
    override(
        deps.get_login_local_use_case,
        FakeUseCase(AuthTokensOutput(user=USER, access_token="access", refresh_token="refresh")),
    )

    response = client.post("/v1/auth/login", json={"email": "alice@example.com", "password": "Passw0rd1"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["accessToken"] == "access"
    assert data["refreshToken"] == "refresh"
    assert data["user"] == {"userId": "user-1", "email": "alice@example.com", "emailVerified": False}


def test_login_invalid_credentials_is_401(client):
    override(
        deps.get_login_local_use_case,
        FakeUseCase(error=AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")),
    )

    response = client.post("/v1/auth/login", json={"email": "alice@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_google_login_reads_id_token(client):
    use_case = override(
        deps.get_login_google_use_case,
        FakeUseCase(AuthTokensOutput(user=USER, access_token="access", refresh_token="refresh")),
    )

    response = client.post("/v1/auth/login/google", json={"idToken": "assertion"})

    assert response.status_code == 200
    assert use_case.commands[0].id_token == "assertion"


def test_google_login_rejected_assertion_is_401(client):
    override(
        deps.get_login_google_use_case,
        FakeUseCase(error=FederationError("Google verification failed: expired", code="GOOGLE_LOGIN_FAILED")),
    )

    response = client.post("/v1/auth/login/google", json={"idToken": "assertion"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "GOOGLE_LOGIN_FAILED"


def test_verify_email_passes_query_token(client):
    use_case = override(
        deps.get_verify_email_use_case,
        FakeUseCase(VerifyEmailOutput(email="alice@example.com", message="Email verified successfully")),
    )

    response = client.get("/v1/auth/verify-email", params={"token": "tok"})

    assert response.status_code == 200
    assert response.json()["data"] == {"message": "Email verified successfully", "email": "alice@example.com"}
    assert use_case.commands[0].token == "tok"


def test_invalid_one_use_token_is_400_not_404(client):
    override(
        deps.get_verify_email_use_case,
        FakeUseCase(error=NotFoundError("Verification token is invalid or expired", code="INVALID_TOKEN")),
    )

    response = client.get("/v1/auth/verify-email", params={"token": "used"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_refresh_token_route(client):
    use_case = override(
        deps.get_refresh_session_use_case,
        FakeUseCase(RefreshSessionOutput(access_token="access-2", refresh_token="refresh-2")),
    )

    response = client.post("/v1/auth/refresh-token", json={"refreshToken": "refresh-1"})

    assert response.status_code == 200
    assert response.json()["data"] == {"accessToken": "access-2", "refreshToken": "refresh-2"}
    assert use_case.commands[0].refresh_token == "refresh-1"


def test_password_reset_routes(client):
    override(deps.get_initiate_password_reset_use_case, FakeUseCase(MessageOutput(message=RESET_REQUESTED_MESSAGE)))
    complete = override(
        deps.get_complete_password_reset_use_case,
        FakeUseCase(MessageOutput(message="Password reset successfully")),
    )

    initiated = client.post("/v1/auth/password-reset/initiate", json={"email": "ghost@example.com"})
    completed = client.post(
        "/v1/auth/password-reset/complete",
        json={"token": "reset-tok", "newPassword": "N3wPassword"},
    )

    assert initiated.json() == {"success": True, "data": {"message": RESET_REQUESTED_MESSAGE}}
    assert completed.status_code == 200
    assert complete.commands[0].new_password == "N3wPassword"


def test_internal_error_exposes_cause_outside_production(client):
    override(
        deps.get_refresh_session_use_case,
        FakeUseCase(error=_internal_error("REFRESH_FAILED")),
    )

    response = client.post("/v1/auth/refresh-token", json={"refreshToken": "refresh-1"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "REFRESH_FAILED"
    assert response.json()["error"]["details"] == "connection reset"


def _internal_error(code: str) -> InternalError:
    try:
        try:
            raise RuntimeError("connection reset")
        except RuntimeError as exc:
            raise InternalError("Failed to refresh token", code=code) from exc
    except InternalError as error:
        return error


def test_logout_without_body_succeeds(client):
    use_case = override(deps.get_logout_session_use_case, FakeUseCase(MessageOutput(message="Logged out successfully")))

    response = client.post("/v1/auth/logout")

    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Logged out successfully"
    assert use_case.commands[0].refresh_token is None


def test_logout_with_body_and_bearer(client, token_service):
    use_case = override(deps.get_logout_session_use_case, FakeUseCase(MessageOutput(message="Logged out successfully")))
    access = token_service.create_access_token(
        identity_id="user-1",
        email="alice@example.com",
        now=datetime.now(timezone.utc),
    )

    response = client.post(
        "/v1/auth/logout",
        json={"refreshToken": "refresh-1"},
        headers={"Authorization": f"Bearer {access}"},
    )

    assert response.status_code == 200
    assert use_case.commands[0].refresh_token == "refresh-1"


def test_me_returns_identity_from_bearer(client, token_service):
    access = token_service.create_access_token(
        identity_id="user-1",
        email="alice@example.com",
        now=datetime.now(timezone.utc),
    )

    response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {access}"})

    assert response.status_code == 200
    assert response.json()["data"] == {"userId": "user-1", "email": "alice@example.com"}


def test_me_without_header(client):
    response = client.get("/v1/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "MISSING_CREDENTIALS"


def test_me_rejects_invalid_and_refresh_tokens(client, token_service):
    refresh = token_service.create_refresh_token(identity_id="user-1", now=datetime.now(timezone.utc))

    for token in ("garbage", refresh.token):
        response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_me_verification_failure(client):
    class ExplodingTokenService:
        def verify(self, token):
            raise RuntimeError("key store unavailable")

    app.dependency_overrides[deps.get_token_service] = lambda: ExplodingTokenService()

    response = client.get("/v1/auth/me", headers={"Authorization": "Bearer abc"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_VERIFICATION_FAILED"


def test_unknown_route_is_enveloped_404(client):
    response = client.get("/v1/auth/nowhere")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": {"code": "ROUTE_NOT_FOUND", "message": "Route GET /v1/auth/nowhere does not exist"},
    }
