"""
Storage for device code records.

Records are reachable by device code (polling / token exchange) and by user
code (verification page). ``insert_if_absent`` is the single atomic step that
guarantees no two live records share either code.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

from redis import Redis

from ..models.device_flow import DeviceCodeRecord
from ..utils.security_mask import mask_sensitive_id, mask_user_code

logger = logging.getLogger(__name__)


class DeviceCodeStore(Protocol):
    def get_by_device_code(self, device_code: str) -> DeviceCodeRecord | None:
        """Return the live record for a device code, None if missing or expired."""
        ...

    def get_by_user_code(self, user_code: str) -> DeviceCodeRecord | None:
        """Return the live record for a user code, None if missing or expired."""
        ...

    def insert_if_absent(self, record: DeviceCodeRecord) -> bool:
        """Store the record unless either code belongs to a live record."""
        ...

    def delete(self, device_code: str) -> bool:
        """Remove a record and its user code mapping."""
        ...

    def delete_expired(self) -> int:
        """Remove records whose expiry has passed. Returns the number removed."""
        ...


class InMemoryDeviceCodeStore:
    """
    Process-local store.

    Only suitable for a single instance; multi-instance deployments need a
    shared store such as RedisDeviceCodeStore.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._device_codes: dict[str, DeviceCodeRecord] = {}
        self._user_codes: dict[str, str] = {}  # user_code -> device_code

    def _live(self, record: DeviceCodeRecord | None) -> DeviceCodeRecord | None:
        if record is None or record.is_expired(self._clock()):
            return None
        return record

    def _remove(self, device_code: str) -> bool:
        record = self._device_codes.pop(device_code, None)
        if record is None:
            return False
        if self._user_codes.get(record.user_code) == device_code:
            del self._user_codes[record.user_code]
        return True

    def get_by_device_code(self, device_code: str) -> DeviceCodeRecord | None:
        with self._lock:
            return self._live(self._device_codes.get(device_code))

    def get_by_user_code(self, user_code: str) -> DeviceCodeRecord | None:
        with self._lock:
            device_code = self._user_codes.get(user_code)
            if device_code is None:
                return None
            return self._live(self._device_codes.get(device_code))

    def insert_if_absent(self, record: DeviceCodeRecord) -> bool:
        with self._lock:
            existing = self._device_codes.get(record.device_code)
            if self._live(existing):
                return False
            owner = self._user_codes.get(record.user_code)
            if owner is not None and self._live(self._device_codes.get(owner)):
                return False

            # Expired holders of either code are reclaimed in place
            if existing is not None:
                self._remove(record.device_code)
            if owner is not None:
                self._remove(owner)

            self._device_codes[record.device_code] = record
            self._user_codes[record.user_code] = record.device_code
            return True

    def delete(self, device_code: str) -> bool:
        with self._lock:
            return self._remove(device_code)

    def delete_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [code for code, record in self._device_codes.items() if record.is_expired(now)]
            for code in expired:
                self._remove(code)
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired device codes")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._device_codes)


class RedisDeviceCodeStore:
    """
    Redis-backed store shared between instances.

    Both keys are written with MSETNX, which sets all keys or none, so the
    uniqueness check and the insert are one atomic step. Keys carry a TTL
    matching the record expiry; lookups also compare ``expires_at`` so a
    key outliving its record is never served.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "device_auth", clock: Callable[[], float] = time.time):
        self.redis = redis_client
        self.device_key_prefix = f"{key_prefix}:device_code:"
        self.user_key_prefix = f"{key_prefix}:user_code:"
        self._clock = clock

    def _device_key(self, device_code: str) -> str:
        return f"{self.device_key_prefix}{device_code}"

    def _user_key(self, user_code: str) -> str:
        return f"{self.user_key_prefix}{user_code}"

    def get_by_device_code(self, device_code: str) -> DeviceCodeRecord | None:
        data = self.redis.get(self._device_key(device_code))
        if not data:
            return None
        record = DeviceCodeRecord.model_validate_json(data)
        if record.is_expired(self._clock()):
            return None
        return record

    def get_by_user_code(self, user_code: str) -> DeviceCodeRecord | None:
        device_code = self.redis.get(self._user_key(user_code))
        if not device_code:
            return None
        record = self.get_by_device_code(device_code)
        if record is None or record.user_code != user_code:
            return None
        return record

    def insert_if_absent(self, record: DeviceCodeRecord) -> bool:
        device_key = self._device_key(record.device_code)
        user_key = self._user_key(record.user_code)

        inserted = self.redis.msetnx({device_key: record.model_dump_json(), user_key: record.device_code})
        if not inserted:
            logger.debug(
                f"Code collision in Redis for device_code {mask_sensitive_id(record.device_code)}"
                f" / user_code {mask_user_code(record.user_code)}"
            )
            return False

        ttl = max(int(record.expires_at - self._clock()), 1)
        pipe = self.redis.pipeline()
        pipe.expire(device_key, ttl)
        pipe.expire(user_key, ttl)
        pipe.execute()
        return True

    def delete(self, device_code: str) -> bool:
        data = self.redis.get(self._device_key(device_code))
        if not data:
            return False
        record = DeviceCodeRecord.model_validate_json(data)
        deleted = self.redis.delete(self._device_key(device_code), self._user_key(record.user_code))
        return deleted > 0

    def delete_expired(self) -> int:
        """Remove records left without a TTL whose expiry has passed."""
        now = self._clock()
        removed = 0
        for key in self.redis.scan_iter(match=f"{self.device_key_prefix}*", count=100):
            data = self.redis.get(key)
            if not data:
                continue
            record = DeviceCodeRecord.model_validate_json(data)
            if record.is_expired(now):
                user_key = self._user_key(record.user_code)
                if self.redis.get(user_key) == record.device_code:
                    self.redis.delete(user_key)
                removed += self.redis.delete(key) > 0
        if removed:
            logger.info(f"Cleaned up {removed} expired device codes from Redis")
        return removed
