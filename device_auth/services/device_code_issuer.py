"""
Device code issuance.

Generates the (user_code, device_code) pair for a validated request and
records it in the device code store with a fixed lifetime.
"""

import logging
import time
from collections.abc import Callable

from ..core.errors import CodeGenerationExhaustedError
from ..models.device_flow import AuthorizationRequest, DeviceCodeRecord, DeviceCodeStatus
from ..utils.security_mask import mask_sensitive_id, mask_user_code
from .code_generator import generate_device_code, generate_user_code
from .code_store import DeviceCodeStore

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 600
DEFAULT_MAX_ATTEMPTS = 10


class DeviceCodeIssuer:
    def __init__(
        self,
        store: DeviceCodeStore,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], float] = time.time,
        user_code_factory: Callable[[], str] = generate_user_code,
        device_code_factory: Callable[[], str] = generate_device_code,
    ):
        self.store = store
        self.expiry_seconds = expiry_seconds
        self.max_attempts = max_attempts
        self._clock = clock
        self._user_code_factory = user_code_factory
        self._device_code_factory = device_code_factory

    def expires_in(self) -> int:
        return self.expiry_seconds

    def issue(self, request: AuthorizationRequest) -> tuple[str, str]:
        """
        Create and store a new device code record.

        Args:
            request: Validated authorization request

        Returns:
            Tuple of (user_code, device_code)

        Raises:
            CodeGenerationExhaustedError: no unique pair after max_attempts tries
        """
        for attempt in range(1, self.max_attempts + 1):
            current_time = int(self._clock())
            record = DeviceCodeRecord(
                device_code=self._device_code_factory(),
                user_code=self._user_code_factory(),
                request=request,
                issued_at=current_time,
                expires_at=current_time + self.expiry_seconds,
                status=DeviceCodeStatus.PENDING,
            )
            if self.store.insert_if_absent(record):
                logger.info(
                    f"Generated device code for client_id: {request.client_id}, "
                    f"user_code: {mask_user_code(record.user_code)}, "
                    f"device_code: {mask_sensitive_id(record.device_code)}"
                )
                return record.user_code, record.device_code

            logger.warning(f"Device code collision on attempt {attempt}/{self.max_attempts}, regenerating")

        logger.error(
            f"Device code generation exhausted after {self.max_attempts} attempts "
            f"for client_id: {request.client_id}; check the entropy source and code space"
        )
        raise CodeGenerationExhaustedError(self.max_attempts)

    def get_by_device_code(self, device_code: str) -> DeviceCodeRecord | None:
        return self.store.get_by_device_code(device_code)

    def get_by_user_code(self, user_code: str) -> DeviceCodeRecord | None:
        return self.store.get_by_user_code(user_code)

    def purge_expired(self) -> int:
        return self.store.delete_expired()
