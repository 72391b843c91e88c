"""
Validation of incoming device authorization requests.
"""

import logging
from collections.abc import Mapping

from ..core.errors import (
    ClientMismatchError,
    MissingClientIdError,
    ScopeNotAllowedError,
    UnauthenticatedError,
    UnknownClientError,
)
from ..models.device_flow import AuthorizationRequest, ClientMetadata
from ..models.principal import ClientPrincipal, ClientUserPrincipal
from .client_registry import ClientRegistry

logger = logging.getLogger(__name__)

CLIENT_ID = "client_id"
SCOPE = "scope"


def parse_scope(value: str | None) -> frozenset[str]:
    """Split a space-delimited scope parameter."""
    if not value:
        return frozenset()
    return frozenset(value.split())


class ScopeValidator:
    """Checks client-requested scopes against the client's registration."""

    def check_scope(self, requested_scope: frozenset[str], client: ClientMetadata) -> None:
        """
        Validate that requested scopes are a subset of the client's allowed scopes.

        Raises:
            ScopeNotAllowedError: if any requested scope is not allowed
        """
        if not requested_scope:
            return

        invalid_scopes = set(requested_scope) - set(client.scope)
        if invalid_scopes:
            logger.warning(f"Invalid scopes requested by client {client.client_id}: {sorted(invalid_scopes)}")
            raise ScopeNotAllowedError(invalid_scopes, set(client.scope))


class AuthorizationRequestValidator:
    """Turns raw request parameters into a validated AuthorizationRequest."""

    def __init__(self, client_registry: ClientRegistry, scope_validator: ScopeValidator | None = None):
        self.client_registry = client_registry
        self.scope_validator = scope_validator or ScopeValidator()

    def validate(
        self,
        parameters: Mapping[str, str],
        principal: ClientPrincipal | ClientUserPrincipal | None,
    ) -> AuthorizationRequest:
        """Validate a device authorization request. See validate_with_client."""
        request, _ = self.validate_with_client(parameters, principal)
        return request

    def validate_with_client(
        self,
        parameters: Mapping[str, str],
        principal: ClientPrincipal | ClientUserPrincipal | None,
    ) -> tuple[AuthorizationRequest, ClientMetadata]:
        """
        Validate a device authorization request.

        Args:
            parameters: Raw request parameters, ``client_id`` and ``scope`` optional
            principal: Authenticated caller, or None

        Returns:
            The validated request and the client metadata it was resolved against

        Raises:
            UnauthenticatedError: caller missing or not authenticated
            ClientMismatchError: client_id differs from the authenticated client
            MissingClientIdError: no client id could be resolved
            UnknownClientError: client id not registered
            ScopeNotAllowedError: requested scope exceeds the client's scopes
        """
        if principal is None or not principal.authenticated:
            raise UnauthenticatedError()

        normalized = dict(parameters)
        requested_client_id = normalized.get(CLIENT_ID)
        if not requested_client_id:
            normalized[CLIENT_ID] = principal.name
        elif requested_client_id != principal.effective_client_id:
            logger.warning(
                f"Client id mismatch: requested {requested_client_id}, authenticated {principal.effective_client_id}"
            )
            raise ClientMismatchError(requested_client_id, principal.effective_client_id)

        client_id = normalized[CLIENT_ID]
        if not client_id:
            raise MissingClientIdError()

        client = self.client_registry.lookup(client_id)
        if client is None:
            raise UnknownClientError(client_id)

        # Only the scope sent by the client is validated; the default
        # applied below is derived from the registration itself.
        requested_scope = parse_scope(normalized.get(SCOPE))
        self.scope_validator.check_scope(requested_scope, client)

        request = AuthorizationRequest(
            client_id=client_id,
            scope=requested_scope or client.scope,
            request_parameters=normalized,
        )
        logger.debug(f"Validated device authorization request for client {client_id}")
        return request, client
