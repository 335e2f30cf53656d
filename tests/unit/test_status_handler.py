"""Unit tests for the per-pass status handler."""

import logging
from unittest.mock import MagicMock

import pytest

from console_operator.constants import CONSOLE_OPERATOR_PLURAL
from console_operator.errors import StatusUpdateError, SyntheticRequeueError
from console_operator.models import Condition, ConditionStatus
from console_operator.status import StatusHandler, handle_progressing_or_degraded
from tests.fixtures.console_resources import InMemoryStatusWriter


@pytest.fixture
def writer():
    return InMemoryStatusWriter()


class TestFlush:
    """Flushing accumulated conditions."""

    def test_unreported_owned_prefixes_are_reset(self, writer):
        handler = StatusHandler(writer)
        handler.add_conditions(
            handle_progressing_or_degraded(
                "OIDCClientConfig", "OIDCConfigSyncFailed", RuntimeError("boom")
            )
        )

        assert handler.flush_and_return(None) is None

        conditions = writer.conditions_of(CONSOLE_OPERATOR_PLURAL)
        assert conditions["OIDCClientConfigDegraded"]["status"] == "True"
        assert conditions["AuthStatusHandlerDegraded"]["status"] == "False"
        assert conditions["AuthStatusHandlerProgressing"]["status"] == "False"

    def test_foreign_conditions_are_preserved(self, writer):
        foreign = {"type": "DeploymentAvailable", "status": "True"}
        writer.statuses[(CONSOLE_OPERATOR_PLURAL, "cluster")] = {
            "conditions": [foreign],
            "observedGeneration": 4,
        }

        StatusHandler(writer).flush_and_raise()

        status = writer.status_of(CONSOLE_OPERATOR_PLURAL)
        assert status["conditions"][0] == foreign
        assert status["observedGeneration"] == 4
        assert len(status["conditions"]) == 5

    def test_later_proposal_for_same_type_wins(self, writer):
        handler = StatusHandler(writer)
        handler.add_conditions(
            [Condition(type="OIDCClientConfigDegraded", status=ConditionStatus.TRUE)]
        )
        handler.add_conditions(
            [Condition(type="OIDCClientConfigDegraded", status=ConditionStatus.FALSE)]
        )

        assert not handler.has_failure
        assert len(handler.conditions) == 1

    def test_degraded_conditions_are_logged_at_flush(self, writer, caplog):
        handler = StatusHandler(writer)
        handler.add_conditions(
            handle_progressing_or_degraded(
                "OIDCClientConfig", "OIDCConfigSyncFailed", RuntimeError("boom")
            )
        )
        assert handler.has_failure

        with caplog.at_level(logging.INFO, logger="console_operator.status.handler"):
            handler.flush_and_raise()

        assert "degraded conditions" in caplog.text
        assert "OIDCClientConfigDegraded" in caplog.text

    def test_healthy_flush_logs_no_degraded_conditions(self, writer, caplog):
        handler = StatusHandler(writer)
        handler.add_conditions(handle_progressing_or_degraded("OIDCClientConfig", ""))

        with caplog.at_level(logging.INFO, logger="console_operator.status.handler"):
            handler.flush_and_raise()

        assert "degraded conditions" not in caplog.text

    def test_returns_pass_error_when_write_succeeds(self, writer):
        err = SyntheticRequeueError()

        assert StatusHandler(writer).flush_and_return(err) is err

    def test_write_error_takes_precedence(self, writer):
        writer.fail_on.add(CONSOLE_OPERATOR_PLURAL)

        result = StatusHandler(writer).flush_and_return(SyntheticRequeueError())

        assert isinstance(result, StatusUpdateError)

    def test_flush_and_raise_without_error(self, writer):
        StatusHandler(writer).flush_and_raise()

        assert writer.writes == [(CONSOLE_OPERATOR_PLURAL, "cluster")]

    def test_flushing_twice_is_rejected(self, writer):
        handler = StatusHandler(writer)
        handler.flush_and_raise()

        with pytest.raises(RuntimeError, match="already been flushed"):
            handler.flush_and_raise()

    def test_writes_once_per_flush(self):
        writer = MagicMock()
        writer.update_status.return_value = True
        handler = StatusHandler(writer)
        handler.add_conditions(handle_progressing_or_degraded("OIDCClientConfig", ""))
        handler.add_conditions(handle_progressing_or_degraded("AuthStatusHandler", ""))

        handler.flush_and_raise()

        writer.update_status.assert_called_once()
