"""
Client registry lookups.

The registry itself is an external collaborator; this module defines the
lookup contract and a YAML-file backed implementation used by default.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from ..models.device_flow import ClientMetadata

logger = logging.getLogger(__name__)


class ClientRegistry(Protocol):
    def lookup(self, client_id: str) -> ClientMetadata | None:
        """Return the client's metadata, or None when it is not registered."""
        ...


def load_clients_config(clients_file: Path) -> dict:
    """Load the client registry configuration from a clients.yml file.

    Args:
        clients_file: Path to the YAML file.

    Returns:
        Parsed YAML as dict, or empty dict on error.
    """
    try:
        if not clients_file.exists():
            logger.warning(f"Clients config file not found at {clients_file}")
            return {}

        with open(clients_file) as f:
            config = yaml.safe_load(f)
            if not isinstance(config, dict):
                return {}
            return config
    except Exception as e:
        logger.error(f"Failed to load clients configuration: {e}", exc_info=True)
        return {}


def parse_clients(config: dict[str, Any]) -> dict[str, ClientMetadata]:
    """Build ClientMetadata entries from the ``clients`` section of the config.

    Malformed entries are skipped and logged; the remaining clients stay usable.
    """
    clients: dict[str, ClientMetadata] = {}
    section = config.get("clients") or {}
    if not isinstance(section, dict):
        logger.error(f"Ignoring clients section: expected a mapping, got {type(section).__name__}")
        return clients

    for client_id, entry in section.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            logger.error(f"Skipping invalid client entry '{client_id}': expected a mapping, got {type(entry).__name__}")
            continue
        scope = entry.get("scope") or []
        if isinstance(scope, str):
            scope = scope.split()
        if not isinstance(scope, (list, tuple, set)):
            logger.error(f"Skipping invalid client entry '{client_id}': scope must be a list or a string")
            continue
        try:
            clients[str(client_id)] = ClientMetadata(
                client_id=str(client_id),
                scope=frozenset(scope),
                additional_information=entry.get("additional_information") or {},
            )
        except ValidationError as e:
            logger.error(f"Skipping invalid client entry '{client_id}': {e}")
    return clients


class InMemoryClientRegistry:
    """Registry over a fixed set of clients."""

    def __init__(self, clients: list[ClientMetadata] | None = None):
        self._clients = {client.client_id: client for client in clients or []}

    def register(self, client: ClientMetadata) -> None:
        self._clients[client.client_id] = client

    def lookup(self, client_id: str) -> ClientMetadata | None:
        return self._clients.get(client_id)


class YamlClientRegistry:
    """Registry loaded lazily from a clients.yml file."""

    def __init__(self, clients_file: Path):
        self.clients_file = clients_file
        self._clients: dict[str, ClientMetadata] | None = None
        self._lock = threading.Lock()

    def _load(self) -> dict[str, ClientMetadata]:
        with self._lock:
            if self._clients is None:
                self._clients = parse_clients(load_clients_config(self.clients_file))
                logger.info(f"Loaded {len(self._clients)} clients from {self.clients_file}")
            return self._clients

    def reload(self) -> None:
        with self._lock:
            self._clients = None

    def lookup(self, client_id: str) -> ClientMetadata | None:
        client = self._load().get(client_id)
        if client is None:
            logger.debug(f"Client not found in registry: {client_id}")
        return client
