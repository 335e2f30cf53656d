"""
Per-pass aggregation of the primary status conditions.

Sub-checks propose conditions while a pass runs; the whole set is written to
the console operator config in one update at the end of the pass, so readers
never observe a mix of two passes' conclusions.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from console_operator.constants import (
    CONDITION_DEGRADED,
    CONFIG_RESOURCE_NAME,
    OWNED_CONDITION_PREFIXES,
)
from console_operator.errors import StatusUpdateError
from console_operator.models import Condition
from console_operator.observability.metrics import metrics_collector
from console_operator.status.conditions import (
    handle_progressing_or_degraded,
    set_condition,
)
from console_operator.utils.kubernetes import (
    CONSOLE_OPERATOR_RESOURCE,
    ClusterResource,
    ClusterStatusWriter,
)

logger = logging.getLogger(__name__)


class StatusHandler:
    """
    Accumulates the conditions proposed during one pass.

    Every condition prefix in ``owned_prefixes`` that no branch reported on
    is reset to neutral at flush time, so a skipped branch can never leave a
    stale condition behind. Conditions of other types on the target object
    are not touched.
    """

    def __init__(
        self,
        writer: ClusterStatusWriter,
        name: str = CONFIG_RESOURCE_NAME,
        resource: ClusterResource = CONSOLE_OPERATOR_RESOURCE,
        owned_prefixes: Iterable[str] = OWNED_CONDITION_PREFIXES,
    ):
        self._writer = writer
        self._name = name
        self._resource = resource
        self._owned_prefixes = tuple(owned_prefixes)
        self._report: dict[str, Condition] = {}
        self._flushed = False

    def add_conditions(self, conditions: Iterable[Condition]) -> None:
        """Propose conditions; a later proposal for the same type wins."""
        for condition in conditions:
            self._report[condition.type] = condition

    @property
    def conditions(self) -> list[Condition]:
        return list(self._report.values())

    @property
    def has_failure(self) -> bool:
        """Whether any proposed Degraded condition is True."""
        return bool(self._degraded_types())

    def _degraded_types(self) -> list[str]:
        return sorted(
            c.type
            for c in self._report.values()
            if c.is_true and c.type.endswith(CONDITION_DEGRADED)
        )

    def _complete_report(self) -> list[Condition]:
        report = dict(self._report)
        for prefix in self._owned_prefixes:
            for neutral in handle_progressing_or_degraded(prefix, ""):
                report.setdefault(neutral.type, neutral)
        return list(report.values())

    def flush_and_return(self, err: BaseException | None) -> BaseException | None:
        """
        Write all accumulated conditions in one update.

        Args:
            err: The logical outcome of the pass

        Returns:
            The write error if the write failed, otherwise ``err``
        """
        if self._flushed:
            raise RuntimeError("status report has already been flushed")
        self._flushed = True

        conditions = self._complete_report()
        now = datetime.now(UTC)

        def merge(status: dict[str, Any]) -> dict[str, Any]:
            merged = list(status.get("conditions") or [])
            for condition in conditions:
                merged = set_condition(merged, condition, now)
            status["conditions"] = merged
            return status

        try:
            written = self._writer.update_status(self._resource, self._name, merge)
        except StatusUpdateError as write_err:
            logger.warning(f"Failed to flush status conditions: {write_err}")
            return write_err

        if written:
            logger.debug(
                f"Flushed {len(conditions)} conditions to "
                f"{self._resource.plural}/{self._name}"
            )
        if self.has_failure:
            logger.info(
                f"Reported degraded conditions on "
                f"{self._resource.plural}/{self._name}: "
                f"{', '.join(self._degraded_types())}"
            )
        metrics_collector.record_conditions(conditions)
        return err

    def flush_and_raise(self, err: BaseException | None = None) -> None:
        """Flush, then raise whatever ``flush_and_return`` reports."""
        result = self.flush_and_return(err)
        if result is not None:
            raise result
