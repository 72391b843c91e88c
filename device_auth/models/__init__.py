"""
Pydantic models for the device auth server.
"""

from .device_flow import (
    AuthorizationRequest,
    ClientMetadata,
    DeviceCodeRecord,
    DeviceCodeResponse,
    DeviceCodeStatus,
    RequestContext,
)
from .principal import ClientPrincipal, ClientUserPrincipal, Principal

__all__ = [
    "AuthorizationRequest",
    "ClientMetadata",
    "DeviceCodeRecord",
    "DeviceCodeResponse",
    "DeviceCodeStatus",
    "RequestContext",
    "ClientPrincipal",
    "ClientUserPrincipal",
    "Principal",
]
