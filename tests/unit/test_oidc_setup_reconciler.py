"""
Unit tests for the OIDC setup reconciler.

Each test runs one or more passes against an in-memory object cache and an
in-memory status writer, then inspects the conditions published on the
console operator config and the console's entry in the authentication status.
"""

import pytest

from console_operator.constants import (
    AUTHENTICATION_PLURAL,
    CONSOLE_OPERATOR_PLURAL,
    MSG_CA_OUTDATED,
    MSG_DEPLOYMENT_NOT_READY,
    MSG_MISSING_SECRET,
    MSG_NO_OIDC_CLIENT,
    MSG_SECRET_OUTDATED,
    RESOURCE_AUTHENTICATION,
    RESOURCE_CONFIG_MAP,
    RESOURCE_CONSOLE_OPERATOR,
    RESOURCE_CRD,
    RESOURCE_DEPLOYMENT,
    RESOURCE_SECRET,
)
from console_operator.errors import (
    ConfigurationError,
    ResourceNotFoundError,
    StatusUpdateError,
    SyntheticRequeueError,
    ValidationError,
)
from console_operator.services import OIDCSetupReconciler
from tests.fixtures.console_resources import (
    CA_CONFIG_NAME,
    CLIENT_ID,
    ISSUER_URL,
    PROVIDER_NAME,
    authentication,
    authentication_crd,
    console_deployment,
    console_operator,
    oauth_secret,
    oidc_client,
    oidc_provider,
)

OWNED_TYPES = (
    "OIDCClientConfigProgressing",
    "OIDCClientConfigDegraded",
    "AuthStatusHandlerProgressing",
    "AuthStatusHandlerDegraded",
)


def primary_conditions(status_writer) -> dict[str, dict]:
    return status_writer.conditions_of(CONSOLE_OPERATOR_PLURAL)


def console_entry(status_writer) -> dict | None:
    entries = status_writer.status_of(AUTHENTICATION_PLURAL).get("oidcClients", [])
    for entry in entries:
        if entry["componentName"] == "console":
            return entry
    return None


def entry_conditions(status_writer) -> dict[str, dict]:
    entry = console_entry(status_writer) or {}
    return {c["type"]: c for c in entry.get("conditions", [])}


def assert_all_owned_neutral(conditions: dict[str, dict]) -> None:
    for condition_type in OWNED_TYPES:
        assert conditions[condition_type]["status"] == "False"
        assert conditions[condition_type]["reason"] == ""
        assert conditions[condition_type]["message"] == ""


def seed_degraded_history(status_writer) -> None:
    """Pretend an earlier pass left every owned condition in a failed state."""
    status_writer.statuses[(CONSOLE_OPERATOR_PLURAL, "cluster")] = {
        "conditions": [
            {
                "type": condition_type,
                "status": "True",
                "reason": "OIDCConfigSyncFailed",
                "message": "stale failure",
                "lastTransitionTime": "2024-01-01T00:00:00Z",
            }
            for condition_type in OWNED_TYPES
        ]
    }


class TestManagementState:
    """The pass only runs for a Managed console."""

    @pytest.mark.parametrize("state", ["Unmanaged", "Removed"])
    def test_unmanaged_states_skip_without_writes(
        self, reconciler, object_cache, status_writer, state
    ):
        object_cache.upsert(RESOURCE_CONSOLE_OPERATOR, console_operator(state))

        reconciler.sync()

        assert status_writer.writes == []

    @pytest.mark.parametrize("state", [None, ""])
    def test_unset_state_raises_without_writes(
        self, reconciler, object_cache, status_writer, state
    ):
        object_cache.upsert(RESOURCE_CONSOLE_OPERATOR, console_operator(state))

        with pytest.raises(ConfigurationError, match="unknown state"):
            reconciler.sync()
        assert status_writer.writes == []

    def test_unknown_state_raises(self, reconciler, object_cache, status_writer):
        object_cache.upsert(RESOURCE_CONSOLE_OPERATOR, console_operator("Frozen"))

        with pytest.raises(ConfigurationError, match="unknown state: Frozen"):
            reconciler.sync()
        assert status_writer.writes == []

    def test_missing_operator_config_raises(self, reconciler, object_cache):
        object_cache.delete(RESOURCE_CONSOLE_OPERATOR, "cluster")

        with pytest.raises(ResourceNotFoundError):
            reconciler.sync()


class TestCapabilityGate:
    """Behavior of the schema-based feature gate."""

    def test_no_oidc_status_field_resets_owned_conditions(
        self, reconciler, object_cache, status_writer
    ):
        seed_degraded_history(status_writer)
        object_cache.upsert(RESOURCE_CRD, authentication_crd(with_oidc_clients=False))

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))
        # The authentication status is not touched at all
        assert status_writer.status_of(AUTHENTICATION_PLURAL) == {}

    def test_gate_ignores_broken_other_inputs(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.upsert(RESOURCE_CRD, authentication_crd(with_oidc_clients=False))
        object_cache.delete(RESOURCE_SECRET, "console-oauth-config", "openshift-console")
        object_cache.upsert(RESOURCE_DEPLOYMENT, console_deployment(ready=False))

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))

    def test_no_active_version_aborts_without_writes(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.upsert(RESOURCE_CRD, authentication_crd(storage=False))

        with pytest.raises(ConfigurationError, match="served and stored"):
            reconciler.sync()
        assert status_writer.writes == []


class TestNonOIDCAuthentication:
    """Authentication types other than OIDC."""

    def test_resets_stale_oidc_conditions(
        self, reconciler, object_cache, status_writer
    ):
        seed_degraded_history(status_writer)
        object_cache.upsert(
            RESOURCE_AUTHENTICATION, authentication(auth_type="IntegratedOAuth")
        )

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))

    def test_removes_previously_published_entry(
        self, reconciler, object_cache, status_writer
    ):
        reconciler.sync()
        assert console_entry(status_writer) is not None

        object_cache.upsert(
            RESOURCE_AUTHENTICATION, authentication(auth_type="IntegratedOAuth")
        )
        reconciler.sync()

        assert console_entry(status_writer) is None
        assert reconciler.auth_status_handler.current_client_id == ""

    def test_apply_failure_is_surfaced(self, reconciler, object_cache, status_writer):
        object_cache.upsert(
            RESOURCE_AUTHENTICATION, authentication(auth_type="IntegratedOAuth")
        )
        status_writer.fail_on.add(AUTHENTICATION_PLURAL)

        with pytest.raises(StatusUpdateError):
            reconciler.sync()

        conditions = primary_conditions(status_writer)
        assert conditions["AuthStatusHandlerDegraded"]["status"] == "True"
        assert conditions["AuthStatusHandlerDegraded"]["reason"] == "FailedApply"
        assert conditions["OIDCClientConfigDegraded"]["status"] == "False"


class TestConvergedSetup:
    """All checks pass."""

    def test_all_conditions_healthy(self, reconciler, status_writer):
        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))

    def test_secondary_status_shows_available_client(self, reconciler, status_writer):
        reconciler.sync()

        entry = console_entry(status_writer)
        assert entry["componentNamespace"] == "openshift-console"
        assert entry["currentOIDCClients"] == [
            {
                "oidcProviderName": PROVIDER_NAME,
                "issuerURL": ISSUER_URL,
                "clientID": CLIENT_ID,
            }
        ]
        conditions = entry_conditions(status_writer)
        assert conditions["Available"]["status"] == "True"
        assert conditions["Available"]["reason"] == "OIDCConfigAvailable"
        assert conditions["Progressing"]["status"] == "False"
        assert conditions["Degraded"]["status"] == "False"

    def test_second_pass_is_idempotent(self, reconciler, status_writer):
        reconciler.sync()
        first_primary = primary_conditions(status_writer)
        first_entry = console_entry(status_writer)
        writes = len(status_writer.writes)

        reconciler.sync()

        assert primary_conditions(status_writer) == first_primary
        assert console_entry(status_writer) == first_entry
        assert len(status_writer.writes) == writes

    def test_preserves_other_components_entries(
        self, reconciler, object_cache, status_writer
    ):
        other = {
            "componentName": "oauth-openshift",
            "componentNamespace": "openshift-authentication",
            "currentOIDCClients": [],
        }
        status_writer.statuses[(AUTHENTICATION_PLURAL, "cluster")] = {
            "oidcClients": [other]
        }

        reconciler.sync()

        entries = status_writer.status_of(AUTHENTICATION_PLURAL)["oidcClients"]
        assert entries[0] == other
        assert entries[1]["componentName"] == "console"


class TestNotConverged:
    """Valid objects that the deployment has not caught up with yet."""

    @pytest.mark.parametrize(
        ("deployment", "message"),
        [
            (console_deployment(ready=False), MSG_DEPLOYMENT_NOT_READY),
            (console_deployment(secret_version="999"), MSG_SECRET_OUTDATED),
            (console_deployment(ca_version="999"), MSG_CA_OUTDATED),
        ],
    )
    def test_progressing_without_error(
        self, reconciler, object_cache, status_writer, deployment, message
    ):
        object_cache.upsert(RESOURCE_DEPLOYMENT, deployment)

        reconciler.sync()

        conditions = primary_conditions(status_writer)
        assert conditions["OIDCClientConfigProgressing"]["status"] == "True"
        assert conditions["OIDCClientConfigProgressing"]["message"] == message
        assert (
            conditions["OIDCClientConfigProgressing"]["reason"]
            == "DeploymentOIDCConfig"
        )
        assert conditions["OIDCClientConfigDegraded"]["status"] == "False"

        secondary = entry_conditions(status_writer)
        assert secondary["Progressing"]["status"] == "True"
        assert secondary["Available"]["status"] == "False"

    def test_no_ca_configured_skips_ca_check(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.upsert(
            RESOURCE_AUTHENTICATION,
            authentication(providers=[oidc_provider(ca_name="")]),
        )
        object_cache.delete(RESOURCE_CONFIG_MAP, CA_CONFIG_NAME, "openshift-console")
        object_cache.upsert(RESOURCE_DEPLOYMENT, console_deployment(ca_version=None))

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))
        assert entry_conditions(status_writer)["Available"]["status"] == "True"


class TestNoClient:
    """The console has no OIDC client configured."""

    def test_marks_secondary_unavailable(self, reconciler, object_cache, status_writer):
        object_cache.upsert(
            RESOURCE_AUTHENTICATION,
            authentication(
                providers=[
                    oidc_provider(clients=[oidc_client(component_name="other")])
                ]
            ),
        )

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))
        entry = console_entry(status_writer)
        assert entry["currentOIDCClients"] == []
        conditions = entry_conditions(status_writer)
        assert conditions["Available"]["status"] == "False"
        assert conditions["Available"]["reason"] == "OIDCClientConfig"
        assert conditions["Available"]["message"] == MSG_NO_OIDC_CLIENT
        assert conditions["Degraded"]["status"] == "False"

    def test_clears_previous_client_id(self, reconciler, object_cache, status_writer):
        reconciler.sync()
        assert reconciler.auth_status_handler.current_client_id == CLIENT_ID

        object_cache.upsert(RESOURCE_AUTHENTICATION, authentication(providers=[]))
        reconciler.sync()

        assert reconciler.auth_status_handler.current_client_id == ""
        assert console_entry(status_writer)["currentOIDCClients"] == []


class TestAuthoringErrors:
    """Configuration mistakes upstream of the controller."""

    def test_empty_client_id_is_a_hard_error(
        self, object_cache, status_writer
    ):
        checked = []

        def is_workload_ready(deployment):
            checked.append(deployment)
            return True

        reconciler = OIDCSetupReconciler(
            object_cache, status_writer, is_workload_ready=is_workload_ready
        )
        object_cache.upsert(
            RESOURCE_AUTHENTICATION,
            authentication(providers=[oidc_provider(clients=[oidc_client(client_id="")])]),
        )

        with pytest.raises(ValidationError, match="no ID set"):
            reconciler.sync()

        # The consistency check never ran
        assert checked == []
        conditions = primary_conditions(status_writer)
        assert conditions["OIDCClientConfigDegraded"]["status"] == "True"
        assert conditions["OIDCClientConfigProgressing"]["status"] == "False"

    def test_missing_secret_ref_is_degraded_but_not_fatal(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.upsert(
            RESOURCE_AUTHENTICATION,
            authentication(
                providers=[oidc_provider(clients=[oidc_client(secret_name="")])]
            ),
        )

        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))
        conditions = entry_conditions(status_writer)
        assert conditions["Degraded"]["status"] == "True"
        assert conditions["Degraded"]["reason"] == "OIDCClientMissingSecret"
        assert conditions["Degraded"]["message"] == MSG_MISSING_SECRET


class TestFetchErrors:
    """Missing objects are reported as Degraded and requeued."""

    def test_missing_secret(self, reconciler, object_cache, status_writer):
        object_cache.delete(RESOURCE_SECRET, "console-oauth-config", "openshift-console")

        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        conditions = primary_conditions(status_writer)
        degraded = conditions["OIDCClientConfigDegraded"]
        assert degraded["status"] == "True"
        assert degraded["reason"] == "OIDCConfigSyncFailed"
        assert "console-oauth-config" in degraded["message"]
        assert entry_conditions(status_writer)["Degraded"]["reason"] == (
            "OIDCClientSecretGet"
        )

    def test_missing_ca_config_map(self, reconciler, object_cache, status_writer):
        object_cache.delete(RESOURCE_CONFIG_MAP, CA_CONFIG_NAME, "openshift-console")

        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        degraded = primary_conditions(status_writer)["OIDCClientConfigDegraded"]
        assert degraded["status"] == "True"
        assert CA_CONFIG_NAME in degraded["message"]
        assert (
            primary_conditions(status_writer)["OIDCClientConfigProgressing"]["status"]
            == "False"
        )

    def test_missing_deployment(self, reconciler, object_cache, status_writer):
        object_cache.delete(RESOURCE_DEPLOYMENT, "console", "openshift-console")

        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        secondary = entry_conditions(status_writer)
        assert secondary["Degraded"]["status"] == "True"
        assert secondary["Degraded"]["reason"] == "DeploymentOIDCConfig"

    def test_recovers_after_object_reappears(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.delete(RESOURCE_SECRET, "console-oauth-config", "openshift-console")
        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        object_cache.upsert(RESOURCE_SECRET, oauth_secret())
        reconciler.sync()

        assert_all_owned_neutral(primary_conditions(status_writer))


class TestStatusWriteFailures:
    """Failed writes are never masked."""

    def test_secondary_apply_failure_requeues(
        self, reconciler, status_writer
    ):
        status_writer.fail_on.add(AUTHENTICATION_PLURAL)

        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        degraded = primary_conditions(status_writer)["AuthStatusHandlerDegraded"]
        assert degraded["status"] == "True"
        assert degraded["reason"] == "FailedApply"

    def test_primary_write_failure_takes_precedence(
        self, reconciler, object_cache, status_writer
    ):
        object_cache.delete(RESOURCE_SECRET, "console-oauth-config", "openshift-console")
        status_writer.fail_on.add(CONSOLE_OPERATOR_PLURAL)

        with pytest.raises(StatusUpdateError):
            reconciler.sync()

    def test_proposed_conditions_cleared_after_failed_apply(
        self, reconciler, status_writer
    ):
        status_writer.fail_on.add(AUTHENTICATION_PLURAL)

        with pytest.raises(SyntheticRequeueError):
            reconciler.sync()

        assert reconciler.auth_status_handler.conditions == []
        assert reconciler.auth_status_handler.current_client_id == CLIENT_ID
