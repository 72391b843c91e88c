"""
Pydantic models for OAuth 2.0 Device Flow.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

VERIFICATION_URI_KEY = "device_verification_uri"
INTERVAL_KEY = "device_interval"

# Read-only copy of the parameters; serialized back to a plain dict
FrozenParameters = Annotated[
    Mapping[str, str],
    AfterValidator(lambda value: MappingProxyType(dict(value))),
    PlainSerializer(dict, return_type=dict[str, str]),
]


class DeviceCodeStatus(str, Enum):
    """Approval state of a device code, driven by the verification step"""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class AuthorizationRequest(BaseModel):
    """Validated and normalized device authorization request"""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., description="Resolved client identifier")
    scope: frozenset[str] = Field(default_factory=frozenset, description="Requested scope")
    request_parameters: FrozenParameters = Field(
        default_factory=dict, validate_default=True, description="All request parameters after normalization"
    )


class ClientMetadata(BaseModel):
    """Registered client details, read-only to the device flow"""

    client_id: str = Field(..., description="Client ID")
    scope: frozenset[str] = Field(default_factory=frozenset, description="Allowed scopes")
    # Values are left untyped: per-client overrides may be misconfigured
    additional_information: dict[str, Any] = Field(
        default_factory=dict, description="Per-client overrides such as device_verification_uri"
    )

    @property
    def verification_uri_override(self) -> Any:
        return self.additional_information.get(VERIFICATION_URI_KEY)

    @property
    def interval_override(self) -> Any:
        return self.additional_information.get(INTERVAL_KEY)


class DeviceCodeRecord(BaseModel):
    """Persisted association between a device code, a user code and the request"""

    device_code: str
    user_code: str
    request: AuthorizationRequest
    issued_at: int = Field(..., description="Issued timestamp (epoch seconds)")
    expires_at: int = Field(..., description="Expiration timestamp (epoch seconds)")
    status: DeviceCodeStatus = DeviceCodeStatus.PENDING

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class RequestContext(BaseModel):
    """Inbound request details needed to build the response"""

    base_url: str


class DeviceCodeResponse(BaseModel):
    """Response model for device code generation"""

    device_code: str
    user_code: str
    verification_uri: str
    interval: int
    expires_in: int
