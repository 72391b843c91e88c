"""
Device authorization response assembly.

Per-client overrides for the verification URI and polling interval are
read with ``parse_or_default``: a parser returns None for anything it
cannot accept and the default takes its place. A misconfigured client
therefore still gets a working response.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import urlsplit

from ..models.device_flow import (
    INTERVAL_KEY,
    VERIFICATION_URI_KEY,
    ClientMetadata,
    DeviceCodeResponse,
    RequestContext,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL = 2
DEFAULT_VERIFICATION_PATH = "user_verify"


def parse_or_default(raw: Any, parser: Callable[[Any], T | None], default: T, name: str = "value") -> T:
    """Return ``parser(raw)`` unless it yields None, else ``default``."""
    if raw is None:
        return default
    parsed = parser(raw)
    if parsed is None:
        logger.warning(f"Ignoring malformed {name} override {raw!r}, using default")
        return default
    return parsed


def parse_positive_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    if isinstance(raw, str):
        stripped = raw.strip()
        if stripped.isdigit() and stripped.isascii():
            value = int(stripped)
            return value if value > 0 else None
    return None


def parse_absolute_url(raw: Any) -> str | None:
    if not isinstance(raw, str):
        return None
    candidate = raw.strip()
    if not candidate:
        return None
    parts = urlsplit(candidate)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return candidate


def derive_verification_uri(base_url: str, verification_path: str = DEFAULT_VERIFICATION_PATH) -> str:
    """Replace the last path segment of the request URL with the verification path."""
    prefix, _, _ = base_url.rpartition("/")
    return f"{prefix}/{verification_path}"


class DeviceResponseBuilder:
    def __init__(
        self,
        expires_in: Callable[[], int],
        default_interval: int = DEFAULT_INTERVAL,
        verification_path: str = DEFAULT_VERIFICATION_PATH,
    ):
        self._expires_in = expires_in
        self.default_interval = default_interval
        self.verification_path = verification_path

    def resolve_verification_uri(self, client: ClientMetadata, context: RequestContext) -> str:
        derived = derive_verification_uri(context.base_url, self.verification_path)
        return parse_or_default(client.verification_uri_override, parse_absolute_url, derived, VERIFICATION_URI_KEY)

    def resolve_interval(self, client: ClientMetadata) -> int:
        return parse_or_default(client.interval_override, parse_positive_int, self.default_interval, INTERVAL_KEY)

    def build(
        self, user_code: str, device_code: str, client: ClientMetadata, context: RequestContext
    ) -> dict[str, Any]:
        response = DeviceCodeResponse(
            device_code=device_code,
            user_code=user_code,
            verification_uri=self.resolve_verification_uri(client, context),
            interval=self.resolve_interval(client),
            expires_in=self._expires_in(),
        )
        return response.model_dump()
