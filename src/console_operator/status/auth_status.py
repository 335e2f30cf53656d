"""
The console's entry in the authentication resource's OIDC client status.

The handler lives for the whole process. It remembers which OIDC client is
currently active and carries the Available/Progressing/Degraded conditions
proposed for the entry until the next apply.
"""

import copy
import logging
from datetime import UTC, datetime
from typing import Any

from console_operator.constants import (
    CONDITION_AVAILABLE,
    CONDITION_DEGRADED,
    CONDITION_PROGRESSING,
    CONFIG_RESOURCE_NAME,
    REASON_AS_EXPECTED,
)
from console_operator.models import Authentication, Condition, ConditionStatus
from console_operator.status.conditions import set_condition
from console_operator.utils.kubernetes import (
    AUTHENTICATION_RESOURCE,
    ClusterStatusWriter,
)

logger = logging.getLogger(__name__)


class AuthStatusHandler:
    """
    Publishes ``status.oidcClients[]`` for one component.

    Only the entry matching the component identity is written; entries of
    other components are preserved in place.
    """

    def __init__(
        self,
        writer: ClusterStatusWriter,
        component_name: str,
        component_namespace: str,
        authentication_name: str = CONFIG_RESOURCE_NAME,
    ):
        self._writer = writer
        self.component_name = component_name
        self.component_namespace = component_namespace
        self.authentication_name = authentication_name
        self.current_client_id = ""
        self._conditions: dict[str, Condition] = {}

    def with_current_oidc_client(self, client_id: str) -> "AuthStatusHandler":
        """Record the active client ID; empty means no client is configured."""
        self.current_client_id = client_id
        return self

    @property
    def conditions(self) -> list[Condition]:
        return list(self._conditions.values())

    def _set(
        self,
        available: ConditionStatus,
        progressing: ConditionStatus,
        degraded: ConditionStatus,
        reason: str,
        message: str,
    ) -> None:
        self._conditions = {}
        for suffix, status in (
            (CONDITION_AVAILABLE, available),
            (CONDITION_PROGRESSING, progressing),
            (CONDITION_DEGRADED, degraded),
        ):
            # The condition that carries the verdict gets the reason and message
            carries_verdict = (suffix == CONDITION_AVAILABLE) or (
                status == ConditionStatus.TRUE
            )
            self._conditions[suffix] = Condition(
                type=suffix,
                status=status,
                reason=reason if carries_verdict else REASON_AS_EXPECTED,
                message=message if carries_verdict else "",
            )

    def available(self, reason: str, message: str) -> None:
        self._set(
            ConditionStatus.TRUE,
            ConditionStatus.FALSE,
            ConditionStatus.FALSE,
            reason,
            message,
        )

    def unavailable(self, reason: str, message: str) -> None:
        self._set(
            ConditionStatus.FALSE,
            ConditionStatus.FALSE,
            ConditionStatus.FALSE,
            reason,
            message,
        )

    def progressing(self, reason: str, message: str) -> None:
        self._set(
            ConditionStatus.FALSE,
            ConditionStatus.TRUE,
            ConditionStatus.FALSE,
            reason,
            message,
        )

    def degraded(self, reason: str, message: str) -> None:
        self._set(
            ConditionStatus.FALSE,
            ConditionStatus.FALSE,
            ConditionStatus.TRUE,
            reason,
            message,
        )

    def apply(self, authn: Authentication) -> bool:
        """
        Write the component's entry to the authentication status.

        When authentication is not OIDC the entry is removed. Proposed
        conditions are cleared afterwards, whether or not the write worked.

        Returns:
            True if the status was written

        Raises:
            StatusUpdateError: If the write fails
        """
        try:
            return self._writer.update_status(
                AUTHENTICATION_RESOURCE,
                self.authentication_name,
                lambda status: self._mutate(status, authn),
            )
        finally:
            self._conditions = {}

    def _is_own_entry(self, entry: Any) -> bool:
        return (
            isinstance(entry, dict)
            and entry.get("componentName") == self.component_name
            and entry.get("componentNamespace") == self.component_namespace
        )

    def _mutate(self, status: dict[str, Any], authn: Authentication) -> dict[str, Any]:
        entries = list(status.get("oidcClients") or [])
        index = next(
            (i for i, entry in enumerate(entries) if self._is_own_entry(entry)), None
        )

        if not authn.is_oidc:
            if index is None:
                return status
            del entries[index]
        else:
            existing = entries[index] if index is not None else {}
            entry = self._desired_entry(authn, existing)
            if index is None:
                entries.append(entry)
            else:
                entries[index] = entry

        if entries:
            status["oidcClients"] = entries
        else:
            status.pop("oidcClients", None)
        return status

    def _desired_entry(
        self, authn: Authentication, existing: dict[str, Any]
    ) -> dict[str, Any]:
        entry = copy.deepcopy(existing)
        entry["componentName"] = self.component_name
        entry["componentNamespace"] = self.component_namespace
        entry["currentOIDCClients"] = (
            [self._current_client(authn)] if self.current_client_id else []
        )

        conditions = list(existing.get("conditions") or [])
        now = datetime.now(UTC)
        for condition in self._conditions.values():
            conditions = set_condition(conditions, condition, now)
        if conditions:
            entry["conditions"] = conditions
        return entry

    def _current_client(self, authn: Authentication) -> dict[str, str]:
        for provider in authn.spec.oidc_providers:
            for oidc_client in provider.oidc_clients:
                if (
                    oidc_client.component_name == self.component_name
                    and oidc_client.component_namespace == self.component_namespace
                    and oidc_client.client_id == self.current_client_id
                ):
                    return {
                        "oidcProviderName": provider.name,
                        "issuerURL": provider.issuer.issuer_url,
                        "clientID": self.current_client_id,
                    }
        logger.debug(
            f"Active client {self.current_client_id} not found among OIDC providers"
        )
        return {
            "oidcProviderName": "",
            "issuerURL": "",
            "clientID": self.current_client_id,
        }
