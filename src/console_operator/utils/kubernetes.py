"""
Kubernetes utilities for the console operator.

This module provides helper functions for interacting with the Kubernetes API.

Key functionality:
- Kubernetes client management and configuration
- Status writes with optimistic concurrency and conflict retry
- Seeding the object cache from a one-shot list of the watched objects
"""

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from console_operator.constants import (
    AUTHENTICATION_CRD_NAME,
    AUTHENTICATION_GROUP,
    AUTHENTICATION_PLURAL,
    AUTHENTICATION_VERSION,
    CONFIG_RESOURCE_NAME,
    CONSOLE_OPERATOR_GROUP,
    CONSOLE_OPERATOR_PLURAL,
    CONSOLE_OPERATOR_VERSION,
    RESOURCE_AUTHENTICATION,
    RESOURCE_CONFIG_MAP,
    RESOURCE_CONSOLE_OPERATOR,
    RESOURCE_CRD,
    RESOURCE_DEPLOYMENT,
    RESOURCE_SECRET,
)
from console_operator.errors import KubernetesAPIError, StatusUpdateError
from console_operator.utils.object_cache import ObjectCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterResource:
    """Coordinates of a cluster-scoped custom resource."""

    group: str
    version: str
    plural: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


AUTHENTICATION_RESOURCE = ClusterResource(
    AUTHENTICATION_GROUP, AUTHENTICATION_VERSION, AUTHENTICATION_PLURAL
)
CONSOLE_OPERATOR_RESOURCE = ClusterResource(
    CONSOLE_OPERATOR_GROUP, CONSOLE_OPERATOR_VERSION, CONSOLE_OPERATOR_PLURAL
)

StatusMutation: TypeAlias = Callable[[dict[str, Any]], dict[str, Any]]


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    This function handles both in-cluster and local development configurations.

    Returns:
        Configured Kubernetes API client
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


class ClusterStatusWriter:
    """
    Writes the status subresource of cluster-scoped custom resources.

    Every write reads the live object first, applies a mutation to its status
    and sends the result back carrying the resourceVersion that was read, so a
    concurrent writer causes a conflict instead of a lost update.
    """

    def __init__(
        self,
        k8s_client: client.ApiClient | None = None,
        retries: int = 5,
        field_manager: str | None = None,
    ):
        self.k8s_client = k8s_client
        self.retries = retries
        self.field_manager = field_manager

    @property
    def custom_objects_api(self) -> client.CustomObjectsApi:
        if self.k8s_client is None:
            self.k8s_client = get_kubernetes_client()
        return client.CustomObjectsApi(self.k8s_client)

    def update_status(
        self, resource: ClusterResource, name: str, mutate: StatusMutation
    ) -> bool:
        """
        Apply ``mutate`` to the live status of ``resource/name``.

        Args:
            resource: Which custom resource to write
            name: Object name
            mutate: Receives a copy of the current status, returns the desired one

        Returns:
            True if a write happened, False if the status was already as desired

        Raises:
            StatusUpdateError: If the object cannot be read or written
        """
        api = self.custom_objects_api
        for attempt in range(1, self.retries + 1):
            try:
                obj = api.get_cluster_custom_object(
                    group=resource.group,
                    version=resource.version,
                    plural=resource.plural,
                    name=name,
                )
            except ApiException as e:
                raise StatusUpdateError(
                    f"failed to read {resource.plural}/{name}: {e.reason}", cause=e
                ) from e

            current = copy.deepcopy(obj.get("status") or {})
            desired = mutate(copy.deepcopy(current))
            if desired == current:
                return False

            obj["status"] = desired
            kwargs: dict[str, Any] = {}
            if self.field_manager:
                kwargs["field_manager"] = self.field_manager
            try:
                api.replace_cluster_custom_object_status(
                    group=resource.group,
                    version=resource.version,
                    plural=resource.plural,
                    name=name,
                    body=obj,
                    **kwargs,
                )
                return True
            except ApiException as e:
                if e.status == 409 and attempt < self.retries:
                    logger.debug(
                        f"Conflict writing {resource.plural}/{name} status, "
                        f"retrying ({attempt}/{self.retries})"
                    )
                    continue
                raise StatusUpdateError(
                    f"failed to update {resource.plural}/{name} status: {e.reason}",
                    cause=e,
                ) from e

        # Only reachable with retries < 1
        raise StatusUpdateError(f"failed to update {resource.plural}/{name} status")


def _to_dict(api_client: client.ApiClient, obj: Any) -> dict[str, Any]:
    """Convert a typed client model to its camelCase wire layout."""
    if isinstance(obj, dict):
        return obj
    return api_client.sanitize_for_serialization(obj)


def seed_object_cache(
    cache: ObjectCache,
    target_namespace: str,
    k8s_client: client.ApiClient | None = None,
) -> int:
    """
    Prime the object cache with a one-shot list of every watched object.

    Objects already observed through watch events are kept as they are.
    Missing cluster-scoped objects are skipped; the sync pass reports them.

    Returns:
        Number of objects added to the cache

    Raises:
        KubernetesAPIError: On any API error other than NotFound
    """
    api_client = k8s_client or get_kubernetes_client()
    extensions_api = client.ApiextensionsV1Api(api_client)
    custom_api = client.CustomObjectsApi(api_client)
    core_api = client.CoreV1Api(api_client)
    apps_api = client.AppsV1Api(api_client)

    cluster_scoped: list[tuple[str, Callable[[], Any]]] = [
        (
            RESOURCE_CRD,
            lambda: extensions_api.read_custom_resource_definition(
                AUTHENTICATION_CRD_NAME
            ),
        ),
        (
            RESOURCE_AUTHENTICATION,
            lambda: custom_api.get_cluster_custom_object(
                group=AUTHENTICATION_GROUP,
                version=AUTHENTICATION_VERSION,
                plural=AUTHENTICATION_PLURAL,
                name=CONFIG_RESOURCE_NAME,
            ),
        ),
        (
            RESOURCE_CONSOLE_OPERATOR,
            lambda: custom_api.get_cluster_custom_object(
                group=CONSOLE_OPERATOR_GROUP,
                version=CONSOLE_OPERATOR_VERSION,
                plural=CONSOLE_OPERATOR_PLURAL,
                name=CONFIG_RESOURCE_NAME,
            ),
        ),
    ]
    namespaced: list[tuple[str, Callable[[], Any]]] = [
        (RESOURCE_SECRET, lambda: core_api.list_namespaced_secret(target_namespace)),
        (
            RESOURCE_CONFIG_MAP,
            lambda: core_api.list_namespaced_config_map(target_namespace),
        ),
        (
            RESOURCE_DEPLOYMENT,
            lambda: apps_api.list_namespaced_deployment(target_namespace),
        ),
    ]

    added = 0
    for resource, read in cluster_scoped:
        try:
            obj = read()
        except ApiException as e:
            if e.status == 404:
                logger.info(f"No {resource} object to seed the cache with")
                continue
            raise KubernetesAPIError(
                f"failed to read {resource}", reason=e.reason, cause=e
            ) from e
        added += cache.prime(resource, _to_dict(api_client, obj))

    for resource, list_objects in namespaced:
        try:
            object_list = list_objects()
        except ApiException as e:
            raise KubernetesAPIError(
                f"failed to list {resource} in {target_namespace}",
                reason=e.reason,
                cause=e,
            ) from e
        for item in object_list.items or []:
            added += cache.prime(resource, _to_dict(api_client, item))

    logger.info(f"Seeded object cache with {added} objects")
    return added
