"""
In-memory snapshot store for the cluster objects the controller reads.

The store is fed by watch events and read by the sync pass. Every read
returns a private copy, so a pass works on immutable snapshots even when the
watch layer updates the store concurrently.
"""

import copy
import threading
from typing import Any, TypeAlias

from console_operator.constants import (
    RESOURCE_AUTHENTICATION,
    RESOURCE_CONFIG_MAP,
    RESOURCE_CONSOLE_OPERATOR,
    RESOURCE_CRD,
    RESOURCE_DEPLOYMENT,
    RESOURCE_SECRET,
)
from console_operator.errors import ResourceNotFoundError

# Secret payloads are never needed, only their metadata
_SECRET_PAYLOAD_FIELDS = ("data", "stringData")

CacheKey: TypeAlias = tuple[str, str, str]


class ObjectCache:
    """Thread-safe store of raw object bodies keyed by resource, namespace and name."""

    def __init__(self):
        self._objects: dict[CacheKey, dict[str, Any]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(resource: str, namespace: str | None, name: str) -> CacheKey:
        return (resource, namespace or "", name)

    def _key_for(self, resource: str, body: dict[str, Any]) -> CacheKey:
        metadata = body.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError(f"cannot cache {resource} object without metadata.name")
        return self.make_key(resource, metadata.get("namespace"), name)

    @staticmethod
    def _prepare(resource: str, body: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(body))
        if resource == RESOURCE_SECRET:
            for field in _SECRET_PAYLOAD_FIELDS:
                stored.pop(field, None)
        return stored

    def upsert(self, resource: str, body: dict[str, Any]) -> None:
        """Store the latest observed body of an object."""
        key = self._key_for(resource, body)
        stored = self._prepare(resource, body)
        with self._lock:
            self._objects[key] = stored

    def prime(self, resource: str, body: dict[str, Any]) -> bool:
        """Store a body only if no newer observation exists yet.

        Returns:
            True if the body was stored
        """
        key = self._key_for(resource, body)
        stored = self._prepare(resource, body)
        with self._lock:
            if key in self._objects:
                return False
            self._objects[key] = stored
            return True

    def delete(self, resource: str, name: str, namespace: str | None = None) -> None:
        with self._lock:
            self._objects.pop(self.make_key(resource, namespace, name), None)

    def get(
        self, resource: str, name: str, namespace: str | None = None
    ) -> dict[str, Any]:
        """
        Get a snapshot of an object.

        Raises:
            ResourceNotFoundError: If the object has not been observed
        """
        with self._lock:
            body = self._objects.get(self.make_key(resource, namespace, name))
            if body is None:
                raise ResourceNotFoundError(resource, name, namespace)
            return copy.deepcopy(body)

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    # Typed listers used by the sync pass

    def get_crd(self, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_CRD, name)

    def get_authentication(self, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_AUTHENTICATION, name)

    def get_console_operator(self, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_CONSOLE_OPERATOR, name)

    def get_secret(self, namespace: str, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_SECRET, name, namespace)

    def get_config_map(self, namespace: str, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_CONFIG_MAP, name, namespace)

    def get_deployment(self, namespace: str, name: str) -> dict[str, Any]:
        return self.get(RESOURCE_DEPLOYMENT, name, namespace)
