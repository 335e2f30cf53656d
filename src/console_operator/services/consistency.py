"""
Has the console deployment picked up the current OIDC client configuration?

The deployment records, as annotations, the resourceVersion of the OAuth
secret and of the issuer CA config map it last consumed. Those fingerprints
are compared by exact string equality with the live objects; the contents
are never inspected.
"""

import logging
from collections.abc import Callable
from typing import Any, NamedTuple, TypeAlias

from console_operator.constants import (
    AUTHN_CA_TRUST_CONFIG_VERSION_ANNOTATION,
    MSG_CA_OUTDATED,
    MSG_DEPLOYMENT_NOT_READY,
    MSG_SECRET_OUTDATED,
    OAUTH_SECRET_VERSION_ANNOTATION,
)
from console_operator.models import OIDCClientConfig
from console_operator.utils.deployment import is_available_and_updated

logger = logging.getLogger(__name__)

ObjectBody: TypeAlias = dict[str, Any]


class ReadinessResult(NamedTuple):
    """Outcome of a consistency check that did not fail outright."""

    ready: bool
    reason: str = ""


def live_fingerprint(obj: ObjectBody) -> str:
    """The opaque version token of a live object."""
    return (obj.get("metadata") or {}).get("resourceVersion", "")


def recorded_fingerprint(workload: ObjectBody, annotation: str) -> str | None:
    """The version token the workload recorded when it last applied config."""
    return ((workload.get("metadata") or {}).get("annotations") or {}).get(annotation)


class ConsistencyChecker:
    """
    Correlates the workload's applied fingerprints with the live objects.

    Checks run in a fixed order and the first not-ready outcome wins:
    workload health, OAuth secret fingerprint, then issuer CA fingerprint.
    """

    def __init__(
        self,
        get_config_map: Callable[[str], ObjectBody],
        is_workload_ready: Callable[[ObjectBody], bool] = is_available_and_updated,
    ):
        """
        Args:
            get_config_map: Returns the named config map from the target
                namespace, raising when it does not exist
            is_workload_ready: Whether the workload's current generation is
                rolled out and available
        """
        self._get_config_map = get_config_map
        self._is_workload_ready = is_workload_ready

    def check_client_config_status(
        self,
        client_config: OIDCClientConfig,
        client_secret: ObjectBody,
        workload: ObjectBody,
    ) -> ReadinessResult:
        """
        Check whether the workload runs with the current client configuration.

        Returns:
            ``ReadinessResult(True)`` when converged, otherwise
            ``ReadinessResult(False, reason)``

        Raises:
            ResourceNotFoundError: If the configured CA config map is missing
        """
        if not self._is_workload_ready(workload):
            return ReadinessResult(False, MSG_DEPLOYMENT_NOT_READY)

        if live_fingerprint(client_secret) != recorded_fingerprint(
            workload, OAUTH_SECRET_VERSION_ANNOTATION
        ):
            return ReadinessResult(False, MSG_SECRET_OUTDATED)

        if client_config.ca_config_name:
            ca_config = self._get_config_map(client_config.ca_config_name)
            if live_fingerprint(ca_config) != recorded_fingerprint(
                workload, AUTHN_CA_TRUST_CONFIG_VERSION_ANNOTATION
            ):
                return ReadinessResult(False, MSG_CA_OUTDATED)
        else:
            logger.debug("No issuer CA configured, skipping CA fingerprint check")

        return ReadinessResult(True)
