#!/usr/bin/env python3
"""
Console Operator - Main entry point for the Kopf-based OIDC setup controller.

The operator verifies that the console deployment runs with the OIDC client
configured in the cluster authentication resource and reports the outcome:
- OIDCClientConfig*/AuthStatusHandler* conditions on the console operator config
- the console's entry in the authentication resource's oidcClients status

Usage:
    python -m console_operator.operator
    # Or with kopf directly:
    kopf run -m console_operator.operator --all-namespaces

Environment Variables:
    TARGET_NAMESPACE: Namespace of the console deployment (openshift-console)
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    RESYNC_INTERVAL_SECONDS: Base interval of the periodic resync
"""

import asyncio
import logging
import random
import sys

import kopf
from kubernetes import config

from console_operator.constants import CONSOLE_OPERATOR_NAME, CONTROLLER_NAME
from console_operator.errors import OperatorError

# Import all handler modules to register them with kopf
from console_operator.handlers import oidc_setup  # noqa: F401
from console_operator.observability.logging import setup_structured_logging
from console_operator.observability.metrics import MetricsServer
from console_operator.services import OIDCSetupReconciler
from console_operator.settings import settings as operator_settings
from console_operator.utils.kubernetes import ClusterStatusWriter, seed_object_cache
from console_operator.utils.object_cache import ObjectCache
from console_operator.utils.scheduling import SyncLoop, SyncTrigger


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level,
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
    )


def build_sync_loop(memo: kopf.Memo) -> SyncLoop:
    """
    Wire the object cache, status writer and reconciler into a sync loop.

    The cache and trigger are stored on ``memo`` so the event handlers can
    reach them.
    """
    memo.object_cache = ObjectCache()
    memo.sync_trigger = SyncTrigger()
    memo.status_writer = ClusterStatusWriter(
        retries=operator_settings.status_update_retries,
        field_manager=operator_settings.field_manager,
    )
    memo.reconciler = OIDCSetupReconciler(
        memo.object_cache,
        memo.status_writer,
        target_namespace=operator_settings.target_namespace,
    )
    memo.sync_loop = SyncLoop(
        memo.reconciler.sync,
        memo.sync_trigger,
        controller=CONTROLLER_NAME,
        resync_interval=operator_settings.resync_interval_seconds,
        jitter_factor=operator_settings.resync_jitter_factor,
        base_delay=operator_settings.requeue_base_delay_seconds,
        max_delay=operator_settings.requeue_max_delay_seconds,
    )
    return memo.sync_loop


@kopf.on.startup()
async def startup_handler(
    settings: kopf.OperatorSettings, memo: kopf.Memo, **_
) -> None:
    """
    Operator startup configuration.

    This handler runs once when the operator starts up and:
    - configures peering and watch reconnects
    - loads the Kubernetes configuration
    - seeds the object cache and starts the sync loop
    - starts the metrics and readiness endpoints
    """
    logging.info("Starting console operator...")
    settings.watching.reconnect_backoff = 1.0  # Reconnect delay

    # Configure peering for leader election with random priority
    settings.peering.name = CONSOLE_OPERATOR_NAME
    settings.peering.priority = random.randint(0, 32767)
    logging.info(
        f"Peering priority set to {settings.peering.priority} for leader election"
    )

    logging.info(f"Target namespace: {operator_settings.target_namespace}")

    # Load Kubernetes configuration if not already loaded
    try:
        config.load_incluster_config()
        logging.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logging.info("Loaded kubeconfig configuration")
        except config.ConfigException:
            logging.error("Failed to load Kubernetes configuration")
            raise

    sync_loop = build_sync_loop(memo)

    try:
        await asyncio.to_thread(
            seed_object_cache, memo.object_cache, operator_settings.target_namespace
        )
    except OperatorError as e:
        logging.error(f"Failed to seed the object cache: {e}")
        raise e.as_kopf_error() from e

    memo.sync_task = asyncio.create_task(sync_loop.run())

    # Start metrics server for Prometheus scraping and readiness checks
    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port,
            host=operator_settings.metrics_host,
            ready_check=lambda: sync_loop.has_synced,
        )
        await metrics_server.start()
        memo.metrics_server = metrics_server
        logging.info(
            f"Metrics and readiness endpoints available on "
            f"{operator_settings.metrics_host}:{operator_settings.metrics_port}"
        )
    except OSError as e:
        logging.error(f"Failed to start metrics server: {e}")
        # Don't fail operator startup if metrics server fails
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(memo: kopf.Memo, **_) -> None:
    """
    Operator cleanup handler.

    Stops the sync loop after its current pass and shuts down the metrics
    server.
    """
    logging.info("Shutting down console operator...")

    sync_loop: SyncLoop | None = getattr(memo, "sync_loop", None)
    sync_task: asyncio.Task | None = getattr(memo, "sync_task", None)
    if sync_loop is not None:
        sync_loop.stop()
    if sync_task is not None:
        await sync_task

    metrics_server: MetricsServer | None = getattr(memo, "metrics_server", None)
    if metrics_server is not None:
        await metrics_server.stop()


def main() -> None:
    """
    Main entry point for the operator.

    This function:
    1. Configures logging
    2. Runs the kopf operator cluster-wide; namespaced sources are filtered
       to the target namespace by the handlers
    """
    configure_logging()

    try:
        kopf.run(
            clusterwide=True,
            liveness_endpoint="http://0.0.0.0:8080/healthz",
        )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Operator failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
