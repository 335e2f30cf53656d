"""
Deriving and merging status conditions.

One logical check is reported on two independent axes, ``<prefix>Progressing``
and ``<prefix>Degraded``. The helpers here turn a check outcome into that
pair and merge conditions into a status object's condition list.
"""

from datetime import UTC, datetime
from typing import Any

from console_operator.constants import CONDITION_DEGRADED, CONDITION_PROGRESSING
from console_operator.models import Condition, ConditionStatus


def handle_degraded(
    type_prefix: str, reason: str, err: BaseException | None
) -> Condition:
    """Degraded=True carrying the error text, or a neutral Degraded=False."""
    if err is not None:
        return Condition(
            type=type_prefix + CONDITION_DEGRADED,
            status=ConditionStatus.TRUE,
            reason=reason,
            message=str(err),
        )
    return Condition(type=type_prefix + CONDITION_DEGRADED, status=ConditionStatus.FALSE)


def handle_progressing(type_prefix: str, reason: str, message: str = "") -> Condition:
    """Progressing=True with the message, or a neutral Progressing=False."""
    if message:
        return Condition(
            type=type_prefix + CONDITION_PROGRESSING,
            status=ConditionStatus.TRUE,
            reason=reason,
            message=message,
        )
    return Condition(
        type=type_prefix + CONDITION_PROGRESSING, status=ConditionStatus.FALSE
    )


def handle_progressing_or_degraded(
    type_prefix: str,
    reason: str,
    err: BaseException | None = None,
    not_ready_message: str = "",
    not_ready_reason: str = "",
) -> list[Condition]:
    """
    Map one check outcome onto its Progressing/Degraded pair.

    - error: Degraded=True (reason, error text), Progressing=False
    - no error, not-ready message: Progressing=True, Degraded=False
    - neither: both False, clearing any earlier negative state

    Args:
        type_prefix: Condition type prefix, e.g. ``OIDCClientConfig``
        reason: Reason recorded on Degraded when ``err`` is set
        err: Hard failure of the check, if any
        not_ready_message: Why the check has not converged yet
        not_ready_reason: Reason recorded on Progressing; defaults to ``reason``

    Returns:
        ``[Progressing, Degraded]``
    """
    if err is not None:
        return [
            handle_progressing(type_prefix, ""),
            handle_degraded(type_prefix, reason, err),
        ]
    if not_ready_message:
        return [
            handle_progressing(
                type_prefix, not_ready_reason or reason, not_ready_message
            ),
            handle_degraded(type_prefix, "", None),
        ]
    return [handle_progressing(type_prefix, ""), handle_degraded(type_prefix, "", None)]


def find_condition(
    conditions: list[dict[str, Any]], condition_type: str
) -> dict[str, Any] | None:
    """Get a specific condition from a raw condition list."""
    for condition in conditions:
        if isinstance(condition, dict) and condition.get("type") == condition_type:
            return condition
    return None


def set_condition(
    conditions: list[dict[str, Any]],
    condition: Condition,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Add or replace a condition in a raw condition list.

    ``lastTransitionTime`` is kept from the existing entry when the status did
    not change, otherwise stamped with ``now``. Entries of other types and
    their positions are left as they are.

    Returns:
        A new list; the input is not modified.
    """
    timestamp = (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H:%M:%SZ")
    new_condition = condition.to_dict()
    new_condition.setdefault("reason", "")
    new_condition.setdefault("message", "")

    existing = find_condition(conditions, condition.type)
    if existing is not None and existing.get("status") == new_condition["status"]:
        new_condition["lastTransitionTime"] = existing.get(
            "lastTransitionTime", timestamp
        )
    else:
        new_condition["lastTransitionTime"] = timestamp

    updated = []
    replaced = False
    for entry in conditions:
        if isinstance(entry, dict) and entry.get("type") == condition.type:
            if not replaced:
                updated.append(new_condition)
                replaced = True
            continue
        updated.append(entry)
    if not replaced:
        updated.append(new_condition)
    return updated
