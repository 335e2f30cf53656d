"""
OIDC setup reconciler - verifies that the console runs with the current OIDC client.

One ``sync`` call is one pass:

1. Skip entirely unless the console operator is Managed.
2. Gate on the authentication schema carrying ``status.oidcClients``.
3. When authentication is not OIDC, only publish the secondary status.
4. Otherwise locate the console's OIDC client, check that the deployment
   consumed the current secret and CA, and report on both status objects.

Sub-check failures are collected rather than raised so that every status
object still gets a best-effort update; the pass then asks for a quick retry.

Writes:
- consoles.operator.openshift.io/cluster ``.status.conditions``:
  OIDCClientConfigProgressing, OIDCClientConfigDegraded,
  AuthStatusHandlerProgressing, AuthStatusHandlerDegraded
- authentications.config.openshift.io/cluster ``.status.oidcClients``:
  the console entry with currentOIDCClients and Available/Progressing/Degraded
"""

from collections.abc import Callable
from typing import Any

from console_operator.constants import (
    AUTH_STATUS_HANDLER,
    AUTHENTICATION_CRD_NAME,
    CONFIG_RESOURCE_NAME,
    CONSOLE_COMPONENT_NAME,
    CONSOLE_COMPONENT_NAMESPACE,
    CONSOLE_DEPLOYMENT_NAME,
    CONTROLLER_NAME,
    MANAGEMENT_STATE_MANAGED,
    MANAGEMENT_STATE_REMOVED,
    MANAGEMENT_STATE_UNMANAGED,
    MSG_MISSING_SECRET,
    MSG_NO_OIDC_CLIENT,
    OAUTH_CLIENT_SECRET_NAME,
    OIDC_CLIENT_CONFIG,
    REASON_DEPLOYMENT_OIDC_CONFIG,
    REASON_FAILED_APPLY,
    REASON_OIDC_CLIENT_CONFIG,
    REASON_OIDC_CLIENT_MISSING_SECRET,
    REASON_OIDC_CLIENT_SECRET_GET,
    REASON_OIDC_CONFIG_AVAILABLE,
    REASON_OIDC_CONFIG_SYNC_FAILED,
)
from console_operator.errors import (
    ConfigurationError,
    OperatorError,
    ResourceNotFoundError,
    StatusUpdateError,
    SyntheticRequeueError,
    ValidationError,
)
from console_operator.models import (
    Authentication,
    ConsoleOperatorConfig,
    OIDCClientConfig,
)
from console_operator.observability.logging import OperatorLogger
from console_operator.observability.metrics import metrics_collector
from console_operator.services.capability import authn_config_has_oidc_fields
from console_operator.services.client_config import get_oidc_client_config
from console_operator.services.consistency import ConsistencyChecker
from console_operator.status import (
    AuthStatusHandler,
    StatusHandler,
    handle_progressing_or_degraded,
)
from console_operator.utils.deployment import is_available_and_updated
from console_operator.utils.kubernetes import ClusterStatusWriter
from console_operator.utils.object_cache import ObjectCache


class OIDCSetupReconciler:
    """
    Drives the OIDC setup checks in a fixed order, once per trigger.

    Passes must not overlap; the scheduling layer serializes them. The only
    state kept between passes is the secondary status handler's current
    client ID.
    """

    def __init__(
        self,
        cache: ObjectCache,
        status_writer: ClusterStatusWriter,
        target_namespace: str = CONSOLE_COMPONENT_NAMESPACE,
        is_workload_ready: Callable[[dict[str, Any]], bool] = is_available_and_updated,
        auth_status_handler: AuthStatusHandler | None = None,
    ):
        """
        Initialize the reconciler.

        Args:
            cache: Snapshot store of every object the pass reads
            status_writer: Writes status subresources back to the API
            target_namespace: Namespace of the console deployment, secret and CA
            is_workload_ready: Deployment health predicate
            auth_status_handler: Secondary status handler, created if not provided
        """
        self.cache = cache
        self.status_writer = status_writer
        self.target_namespace = target_namespace
        self.auth_status_handler = auth_status_handler or AuthStatusHandler(
            status_writer, CONSOLE_COMPONENT_NAME, CONSOLE_COMPONENT_NAMESPACE
        )
        self.consistency_checker = ConsistencyChecker(
            get_config_map=lambda name: cache.get_config_map(target_namespace, name),
            is_workload_ready=is_workload_ready,
        )
        self.logger = OperatorLogger(self.__class__.__name__)

    def sync(self) -> None:
        """
        Run one reconciliation pass.

        Raises:
            SyntheticRequeueError: A sub-check failed; its reason is already
                published as a condition and a fresh pass should run soon
            ConfigurationError: The authentication schema has no active version
                or the management state is unknown
            ValidationError: The console's OIDC client entry has no ID
            ResourceNotFoundError: A configuration object is missing
            StatusUpdateError: Publishing the primary conditions failed
        """
        if not self.handle_managed():
            metrics_collector.record_skip(CONTROLLER_NAME)
            return

        status_handler = StatusHandler(self.status_writer)

        # The schema feature-gates this controller; API validation is assumed
        # to reject type OIDC when status.oidcClients does not exist
        if not authn_config_has_oidc_fields(
            self.cache.get_crd(AUTHENTICATION_CRD_NAME)
        ):
            self.logger.debug("Authentication schema has no oidcClients status")
            status_handler.flush_and_raise()
            return

        authn = Authentication.from_body(
            self.cache.get_authentication(CONFIG_RESOURCE_NAME)
        )

        if not authn.is_oidc:
            self.auth_status_handler.with_current_oidc_client("")
            apply_error = self._apply_auth_status(authn)
            status_handler.add_conditions(
                handle_progressing_or_degraded(
                    AUTH_STATUS_HANDLER, REASON_FAILED_APPLY, apply_error
                )
            )
            status_handler.flush_and_raise(apply_error)
            return

        client_config = get_oidc_client_config(authn)
        if client_config is not None and not client_config.client_id:
            authoring_error = ValidationError(
                "no ID set on console's OIDC client", field="oidcClients.clientID"
            )
            status_handler.add_conditions(
                handle_progressing_or_degraded(
                    OIDC_CLIENT_CONFIG, REASON_OIDC_CONFIG_SYNC_FAILED, authoring_error
                )
            )
            status_handler.flush_and_raise(authoring_error)
            return

        # Keep track of errors during the pass so that it can be requeued
        errors: list[OperatorError] = []

        sync_error: OperatorError | None = None
        not_ready_message = ""
        try:
            not_ready_message = self.sync_auth_type_oidc(client_config)
        except OperatorError as e:
            sync_error = e
            errors.append(e)
        status_handler.add_conditions(
            handle_progressing_or_degraded(
                OIDC_CLIENT_CONFIG,
                REASON_OIDC_CONFIG_SYNC_FAILED,
                sync_error,
                not_ready_message=not_ready_message,
                not_ready_reason=REASON_DEPLOYMENT_OIDC_CONFIG,
            )
        )

        apply_error = self._apply_auth_status(authn)
        status_handler.add_conditions(
            handle_progressing_or_degraded(
                AUTH_STATUS_HANDLER, REASON_FAILED_APPLY, apply_error
            )
        )
        if apply_error is not None:
            errors.append(apply_error)

        if errors:
            for error in errors:
                self.logger.info(
                    f"OIDC setup sub-check failed: {error}",
                    error_type=type(error).__name__,
                )
            status_handler.flush_and_raise(
                SyntheticRequeueError(f"{len(errors)} OIDC setup sub-checks failed")
            )
            return

        status_handler.flush_and_raise()

    def sync_auth_type_oidc(self, client_config: OIDCClientConfig | None) -> str:
        """
        Check the console's OIDC client and record the secondary verdict.

        Args:
            client_config: The console's client entry, None if there is none

        Returns:
            Why the deployment has not converged yet, or an empty string

        Raises:
            ResourceNotFoundError: If the secret, deployment or CA is missing
        """
        if client_config is None:
            self.auth_status_handler.with_current_oidc_client("")
            self.auth_status_handler.unavailable(
                REASON_OIDC_CLIENT_CONFIG, MSG_NO_OIDC_CLIENT
            )
            return ""

        self.auth_status_handler.with_current_oidc_client(client_config.client_id)

        if not client_config.has_secret_ref:
            self.auth_status_handler.degraded(
                REASON_OIDC_CLIENT_MISSING_SECRET, MSG_MISSING_SECRET
            )
            return ""

        try:
            client_secret = self.cache.get_secret(
                self.target_namespace, OAUTH_CLIENT_SECRET_NAME
            )
        except ResourceNotFoundError as e:
            self.auth_status_handler.degraded(REASON_OIDC_CLIENT_SECRET_GET, str(e))
            raise

        try:
            deployment = self.cache.get_deployment(
                self.target_namespace, CONSOLE_DEPLOYMENT_NAME
            )
            result = self.consistency_checker.check_client_config_status(
                client_config, client_secret, deployment
            )
        except ResourceNotFoundError as e:
            self.auth_status_handler.degraded(REASON_DEPLOYMENT_OIDC_CONFIG, str(e))
            raise

        if not result.ready:
            self.auth_status_handler.progressing(
                REASON_DEPLOYMENT_OIDC_CONFIG, result.reason
            )
            return result.reason

        self.auth_status_handler.available(REASON_OIDC_CONFIG_AVAILABLE, "")
        return ""

    def handle_managed(self) -> bool:
        """
        Decide from the operator's management state whether to sync.

        Raises:
            ResourceNotFoundError: If the console operator config is missing
            ConfigurationError: If the management state is not recognized
        """
        operator_config = ConsoleOperatorConfig.from_body(
            self.cache.get_console_operator(CONFIG_RESOURCE_NAME)
        )
        management_state = operator_config.spec.management_state

        if management_state == MANAGEMENT_STATE_MANAGED:
            self.logger.debug(
                "console is in a managed state.", management_state=management_state
            )
            return True
        if management_state == MANAGEMENT_STATE_UNMANAGED:
            self.logger.debug(
                "console is in an unmanaged state.", management_state=management_state
            )
            return False
        if management_state == MANAGEMENT_STATE_REMOVED:
            self.logger.debug(
                "console has been removed.", management_state=management_state
            )
            return False
        raise ConfigurationError(f"console is in an unknown state: {management_state}")

    def _apply_auth_status(self, authn: Authentication) -> StatusUpdateError | None:
        try:
            self.auth_status_handler.apply(authn)
        except StatusUpdateError as e:
            return e
        return None
