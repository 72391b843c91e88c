import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from pydantic import TypeAdapter, ValidationError
from redis import Redis

from ..models.principal import ClientPrincipal, ClientUserPrincipal, Principal
from ..services.client_registry import ClientRegistry, YamlClientRegistry
from ..services.code_store import DeviceCodeStore, InMemoryDeviceCodeStore, RedisDeviceCodeStore
from ..services.device_authorization import DeviceAuthorizationService
from ..services.device_code_issuer import DeviceCodeIssuer
from ..services.request_validator import AuthorizationRequestValidator
from ..services.response_builder import DeviceResponseBuilder
from .config import settings

logger = logging.getLogger(__name__)

_principal_adapter = TypeAdapter(Principal)


def init_redis_connection(redis_url: str) -> Redis:
    """
    Initialize Redis connection using native redis-py

    Raises:
        RuntimeError: If connection fails
    """
    try:
        redis_conn = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=50,
        )

        # Test connection
        redis_conn.ping()
        logger.info(f"Successfully connected to Redis: {redis_url}")
        return redis_conn

    except Exception as e:
        logger.error(f"Failed to connect to Redis at {redis_url}: {e}")
        raise RuntimeError(f"Redis connection failed: {e}")


@lru_cache
def get_code_store() -> DeviceCodeStore:
    if settings.device_code_store == "redis":
        return RedisDeviceCodeStore(init_redis_connection(settings.redis_url), key_prefix=settings.redis_key_prefix)
    return InMemoryDeviceCodeStore()


@lru_cache
def get_client_registry() -> ClientRegistry:
    return YamlClientRegistry(settings.clients_file_path)


@lru_cache
def get_device_code_issuer() -> DeviceCodeIssuer:
    return DeviceCodeIssuer(
        get_code_store(),
        expiry_seconds=settings.device_code_expiry_seconds,
        max_attempts=settings.max_code_generation_attempts,
    )


@lru_cache
def get_device_authorization_service() -> DeviceAuthorizationService:
    issuer = get_device_code_issuer()
    return DeviceAuthorizationService(
        validator=AuthorizationRequestValidator(get_client_registry()),
        issuer=issuer,
        response_builder=DeviceResponseBuilder(
            expires_in=issuer.expires_in,
            default_interval=settings.device_code_poll_interval,
            verification_path=settings.device_verification_path,
        ),
    )


def get_principal(request: Request) -> ClientPrincipal | ClientUserPrincipal | None:
    """
    Get the authenticated caller from request state.

    Upstream authentication middleware stores the principal on
    ``request.state.principal``, either as a model or as a plain dict
    tagged with ``kind``. Returns None when no usable principal is present.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None or isinstance(principal, (ClientPrincipal, ClientUserPrincipal)):
        return principal
    try:
        return _principal_adapter.validate_python(principal)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed principal on request state: {e.error_count()} errors")
        return None


CurrentPrincipal = Annotated[ClientPrincipal | ClientUserPrincipal | None, Depends(get_principal)]
DeviceAuthorization = Annotated[DeviceAuthorizationService, Depends(get_device_authorization_service)]
