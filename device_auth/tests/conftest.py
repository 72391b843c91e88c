"""
Pytest configuration and shared fixtures for device_auth tests.
"""

import os
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# Set environment variables BEFORE importing the app
# This ensures settings are loaded with correct values
os.environ["DEVICE_CODE_STORE"] = "memory"
os.environ["DEVICE_CODE_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["AUTH_SERVER_API_PREFIX"] = ""

from device_auth.models.device_flow import ClientMetadata  # noqa: E402
from device_auth.models.principal import ClientPrincipal  # noqa: E402
from device_auth.services.client_registry import InMemoryClientRegistry  # noqa: E402
from device_auth.services.code_store import InMemoryDeviceCodeStore  # noqa: E402
from device_auth.services.device_authorization import DeviceAuthorizationService  # noqa: E402
from device_auth.services.device_code_issuer import DeviceCodeIssuer  # noqa: E402
from device_auth.services.request_validator import AuthorizationRequestValidator  # noqa: E402
from device_auth.services.response_builder import DeviceResponseBuilder  # noqa: E402


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def device_client() -> ClientMetadata:
    return ClientMetadata(client_id="device-app-1", scope=frozenset({"read", "write"}))


@pytest.fixture
def override_client() -> ClientMetadata:
    return ClientMetadata(
        client_id="device-app-2",
        scope=frozenset({"read", "write"}),
        additional_information={
            "device_verification_uri": "https://example.com/activate",
            "device_interval": "5",
        },
    )


@pytest.fixture
def client_registry(device_client, override_client) -> InMemoryClientRegistry:
    return InMemoryClientRegistry([device_client, override_client])


@pytest.fixture
def code_store(clock) -> InMemoryDeviceCodeStore:
    return InMemoryDeviceCodeStore(clock=clock)


@pytest.fixture
def issuer(code_store, clock) -> DeviceCodeIssuer:
    return DeviceCodeIssuer(code_store, expiry_seconds=600, clock=clock)


@pytest.fixture
def device_authorization_service(client_registry, issuer) -> DeviceAuthorizationService:
    return DeviceAuthorizationService(
        validator=AuthorizationRequestValidator(client_registry),
        issuer=issuer,
        response_builder=DeviceResponseBuilder(expires_in=issuer.expires_in),
    )


@pytest.fixture
def auth_server_app():
    """Import and return the device auth FastAPI app."""
    from device_auth.server import app

    return app


@pytest.fixture
def principal() -> ClientPrincipal:
    return ClientPrincipal(name="device-app-1")


@pytest.fixture
def test_client(auth_server_app, device_authorization_service, principal) -> Generator[TestClient, None, None]:
    """Test client wired to in-memory collaborators and an authenticated principal."""
    from device_auth.core.dependencies import get_device_authorization_service, get_principal

    auth_server_app.dependency_overrides[get_device_authorization_service] = lambda: device_authorization_service
    auth_server_app.dependency_overrides[get_principal] = lambda: principal

    with TestClient(auth_server_app) as client:
        yield client

    auth_server_app.dependency_overrides.clear()


# Test markers
pytest.mark.integration = pytest.mark.integration
pytest.mark.unit = pytest.mark.unit
