"""Unit tests for AuthorizationRequestValidator and ScopeValidator."""

import pytest

from device_auth.core.errors import (
    ClientMismatchError,
    MissingClientIdError,
    ScopeNotAllowedError,
    UnauthenticatedError,
    UnknownClientError,
)
from device_auth.models.device_flow import AuthorizationRequest, ClientMetadata
from device_auth.models.principal import ClientPrincipal, ClientUserPrincipal
from device_auth.services.client_registry import InMemoryClientRegistry
from device_auth.services.request_validator import AuthorizationRequestValidator, ScopeValidator, parse_scope


@pytest.fixture
def validator(client_registry) -> AuthorizationRequestValidator:
    return AuthorizationRequestValidator(client_registry)


@pytest.mark.unit
class TestAuthentication:
    def test_missing_principal(self, validator):
        with pytest.raises(UnauthenticatedError):
            validator.validate({"client_id": "device-app-1"}, None)

    def test_unauthenticated_principal(self, validator):
        principal = ClientPrincipal(name="device-app-1", authenticated=False)
        with pytest.raises(UnauthenticatedError):
            validator.validate({}, principal)


@pytest.mark.unit
class TestClientResolution:
    def test_client_id_defaults_to_principal_name(self, validator):
        request = validator.validate({}, ClientPrincipal(name="device-app-1"))

        assert request.client_id == "device-app-1"
        assert request.request_parameters["client_id"] == "device-app-1"

    def test_empty_client_id_treated_as_absent(self, validator):
        request = validator.validate({"client_id": ""}, ClientPrincipal(name="device-app-1"))

        assert request.client_id == "device-app-1"

    def test_matching_client_id(self, validator):
        request = validator.validate({"client_id": "device-app-1"}, ClientPrincipal(name="device-app-1"))

        assert request.client_id == "device-app-1"

    def test_client_id_mismatch(self, validator):
        with pytest.raises(ClientMismatchError) as exc_info:
            validator.validate({"client_id": "device-app-2"}, ClientPrincipal(name="device-app-1"))

        assert exc_info.value.requested_client_id == "device-app-2"
        assert exc_info.value.authenticated_client_id == "device-app-1"

    def test_client_user_principal_matches_on_its_client_id(self, validator):
        principal = ClientUserPrincipal(name="alice", client_id="device-app-1")

        request = validator.validate({"client_id": "device-app-1"}, principal)

        assert request.client_id == "device-app-1"

    def test_client_user_principal_rejects_own_name_as_client_id(self, validator):
        principal = ClientUserPrincipal(name="alice", client_id="device-app-1")

        with pytest.raises(ClientMismatchError):
            validator.validate({"client_id": "alice"}, principal)

    def test_missing_client_id(self, validator):
        with pytest.raises(MissingClientIdError):
            validator.validate({}, ClientPrincipal(name=""))

    def test_unknown_client(self, validator):
        with pytest.raises(UnknownClientError) as exc_info:
            validator.validate({"client_id": "ghost"}, ClientPrincipal(name="ghost"))

        assert exc_info.value.client_id == "ghost"

    def test_caller_parameters_not_mutated(self, validator):
        parameters = {"scope": "read"}

        validator.validate(parameters, ClientPrincipal(name="device-app-1"))

        assert parameters == {"scope": "read"}

    def test_extra_parameters_are_kept(self, validator):
        request = validator.validate({"audience": "tv"}, ClientPrincipal(name="device-app-1"))

        assert request.request_parameters["audience"] == "tv"

    def test_request_parameters_are_read_only(self, validator):
        request = validator.validate({"audience": "tv"}, ClientPrincipal(name="device-app-1"))

        with pytest.raises(TypeError):
            request.request_parameters["x"] = "2"
        with pytest.raises(TypeError):
            del request.request_parameters["audience"]
        assert "x" not in request.request_parameters

    def test_request_parameters_detached_from_input(self):
        parameters = {"client_id": "device-app-1"}
        request = AuthorizationRequest(client_id="device-app-1", request_parameters=parameters)

        parameters["scope"] = "admin"

        assert dict(request.request_parameters) == {"client_id": "device-app-1"}

    def test_request_parameters_survive_json_round_trip(self):
        request = AuthorizationRequest(client_id="device-app-1", request_parameters={"audience": "tv"})

        restored = AuthorizationRequest.model_validate_json(request.model_dump_json())

        assert restored.model_dump()["request_parameters"] == {"audience": "tv"}
        with pytest.raises(TypeError):
            restored.request_parameters["audience"] = "radio"


@pytest.mark.unit
class TestScopeValidation:
    @pytest.mark.parametrize("scope", ["read", "write", "read write", "write  read"])
    def test_subset_of_allowed_scopes(self, validator, scope):
        request = validator.validate({"scope": scope}, ClientPrincipal(name="device-app-1"))

        assert request.scope == parse_scope(scope)

    @pytest.mark.parametrize("scope", ["admin", "read admin", "read write delete"])
    def test_scope_outside_allowed_set(self, validator, scope):
        with pytest.raises(ScopeNotAllowedError):
            validator.validate({"scope": scope}, ClientPrincipal(name="device-app-1"))

    def test_scope_overreach_reports_invalid_scopes(self):
        registry = InMemoryClientRegistry([ClientMetadata(client_id="reader", scope=frozenset({"read"}))])
        validator = AuthorizationRequestValidator(registry)

        with pytest.raises(ScopeNotAllowedError) as exc_info:
            validator.validate({"scope": "read write"}, ClientPrincipal(name="reader"))

        assert exc_info.value.invalid_scopes == frozenset({"write"})
        assert "write" in exc_info.value.message

    def test_no_scope_defaults_to_client_scopes(self, validator):
        request = validator.validate({}, ClientPrincipal(name="device-app-1"))

        assert request.scope == frozenset({"read", "write"})
        assert "scope" not in request.request_parameters

    def test_validate_with_client_returns_registry_entry(self, validator, device_client):
        request, client = validator.validate_with_client({"scope": "read"}, ClientPrincipal(name="device-app-1"))

        assert client == device_client
        assert request.scope == frozenset({"read"})


@pytest.mark.unit
class TestScopeValidator:
    def test_empty_request_is_valid(self):
        client = ClientMetadata(client_id="c", scope=frozenset())

        ScopeValidator().check_scope(frozenset(), client)

    def test_any_scope_rejected_when_client_has_none(self):
        client = ClientMetadata(client_id="c", scope=frozenset())

        with pytest.raises(ScopeNotAllowedError):
            ScopeValidator().check_scope(frozenset({"read"}), client)


@pytest.mark.unit
def test_parse_scope():
    assert parse_scope(None) == frozenset()
    assert parse_scope("") == frozenset()
    assert parse_scope(" read  write ") == frozenset({"read", "write"})
