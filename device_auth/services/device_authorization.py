"""
Device authorization pipeline: validate -> issue -> build.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..models.device_flow import RequestContext
from ..models.principal import ClientPrincipal, ClientUserPrincipal
from .device_code_issuer import DeviceCodeIssuer
from .request_validator import AuthorizationRequestValidator
from .response_builder import DeviceResponseBuilder

logger = logging.getLogger(__name__)


class DeviceAuthorizationService:
    def __init__(
        self,
        validator: AuthorizationRequestValidator,
        issuer: DeviceCodeIssuer,
        response_builder: DeviceResponseBuilder,
    ):
        self.validator = validator
        self.issuer = issuer
        self.response_builder = response_builder

    def authorize(
        self,
        parameters: Mapping[str, str],
        principal: ClientPrincipal | ClientUserPrincipal | None,
        context: RequestContext,
    ) -> dict[str, Any]:
        """
        Handle a device authorization request end to end.

        Returns:
            Flat mapping with device_code, user_code, verification_uri, interval and expires_in

        Raises:
            DeviceAuthorizationError: any validation or issuance failure
        """
        request, client = self.validator.validate_with_client(parameters, principal)
        user_code, device_code = self.issuer.issue(request)
        return self.response_builder.build(user_code, device_code, client, context)
