"""
OIDC setup handlers - feed watch events into the object cache.

Every watched object change updates the shared cache and fires the sync
trigger; the sync loop started by the operator turns bursts of events into
a single pass. The handlers never read or write the cluster themselves.

Watched sources:
- the authentication CRD (by name)
- authentications.config.openshift.io and consoles.operator.openshift.io
- Secrets, ConfigMaps and Deployments in the target namespace
"""

import logging
from typing import Any

import kopf

from console_operator.constants import (
    AUTHENTICATION_CRD_NAME,
    AUTHENTICATION_GROUP,
    AUTHENTICATION_PLURAL,
    AUTHENTICATION_VERSION,
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
from console_operator.settings import settings as operator_settings

logger = logging.getLogger(__name__)


def in_target_namespace(namespace: str | None, **_) -> bool:
    """kopf ``when=`` filter for namespaced sources."""
    return namespace == operator_settings.target_namespace


def observe(memo: kopf.Memo, resource: str, event: dict[str, Any]) -> None:
    """
    Apply one watch event to the object cache and request a pass.

    Args:
        memo: Operator memo holding ``object_cache`` and ``sync_trigger``
        resource: Cache resource key of the event's object
        event: Raw watch event with ``type`` and ``object``
    """
    obj = event.get("object") or {}
    metadata = obj.get("metadata") or {}
    name = metadata.get("name")
    if not name:
        return

    if event.get("type") == "DELETED":
        memo.object_cache.delete(resource, name, metadata.get("namespace"))
        logger.debug(f"Dropped {resource}/{name} from the object cache")
    else:
        memo.object_cache.upsert(resource, obj)

    memo.sync_trigger.fire()


@kopf.on.event(
    "apiextensions.k8s.io",
    "v1",
    "customresourcedefinitions",
    field="metadata.name",
    value=AUTHENTICATION_CRD_NAME,
)
async def authentication_crd_event(event, memo: kopf.Memo, **_) -> None:
    """Schema changes of the authentication CRD gate the whole controller."""
    observe(memo, RESOURCE_CRD, event)


@kopf.on.event(AUTHENTICATION_GROUP, AUTHENTICATION_VERSION, AUTHENTICATION_PLURAL)
async def authentication_event(event, memo: kopf.Memo, **_) -> None:
    observe(memo, RESOURCE_AUTHENTICATION, event)


@kopf.on.event(CONSOLE_OPERATOR_GROUP, CONSOLE_OPERATOR_VERSION, CONSOLE_OPERATOR_PLURAL)
async def console_operator_event(event, memo: kopf.Memo, **_) -> None:
    observe(memo, RESOURCE_CONSOLE_OPERATOR, event)


@kopf.on.event("v1", "secrets", when=in_target_namespace)
async def secret_event(event, memo: kopf.Memo, **_) -> None:
    """Only metadata is cached; secret payloads are dropped on insert."""
    observe(memo, RESOURCE_SECRET, event)


@kopf.on.event("v1", "configmaps", when=in_target_namespace)
async def config_map_event(event, memo: kopf.Memo, **_) -> None:
    observe(memo, RESOURCE_CONFIG_MAP, event)


@kopf.on.event("apps", "v1", "deployments", when=in_target_namespace)
async def deployment_event(event, memo: kopf.Memo, **_) -> None:
    observe(memo, RESOURCE_DEPLOYMENT, event)
