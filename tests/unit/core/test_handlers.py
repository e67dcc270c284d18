import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from recovery_guard.core.exceptions import (
    TRY_AGAIN_LATER,
    ConfigurationError,
    PermanentVerificationError,
    RecoveryGuardError,
    RetryBudgetExhaustedError,
    TooManyVerificationAttemptsError,
    UserStoreError,
)
from recovery_guard.core.handlers import register_exception_handlers

ERRORS = {
    "too-many": TooManyVerificationAttemptsError(),
    "permanent": PermanentVerificationError(status_code=500),
    "exhausted": RetryBudgetExhaustedError(attempts=10),
    "config": ConfigurationError("VERIFY_MAIL_API_KEY is missing"),
    "store": UserStoreError("connection refused"),
    "generic": RecoveryGuardError("Bad input", code="bad_input"),
}


@pytest.fixture
def app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise ERRORS[name]

    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, status_code, code",
    [
        ("too-many", 429, "too_many_verification_attempts"),
        ("permanent", 503, "verification_failed"),
        ("exhausted", 503, "retry_budget_exhausted"),
        ("config", 503, "configuration_error"),
        ("store", 500, "user_store_error"),
        ("generic", 400, "bad_input"),
    ],
)
async def test_errors_map_to_status_codes(client, name, status_code, code):
    response = await client.get(f"/raise/{name}")
    assert response.status_code == status_code
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_unavailable_errors_do_not_leak_details(client):
    response = await client.get("/raise/config")
    assert response.json()["detail"] == TRY_AGAIN_LATER


@pytest.mark.asyncio
async def test_store_errors_do_not_leak_details(client):
    response = await client.get("/raise/store")
    assert "connection refused" not in response.json()["detail"]
