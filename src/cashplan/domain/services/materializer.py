"""Virtual occurrence materialization."""

from collections.abc import Iterable
from logging import Logger

from cashplan.domain.models import (
    LedgerEntry,
    Period,
    RecurringRule,
    VirtualOccurrence,
)


def realized_rule_ids(
    entries: Iterable[LedgerEntry],
    period: Period,
) -> set[int]:
    """Return ids of rules already realized (confirmed, adjusted or skipped)."""
    return {
        entry.rule_id
        for entry in entries
        if entry.is_realization and period.contains(entry.entry_date)
    }


def materialize_occurrences(
    rules: Iterable[RecurringRule],
    period: Period,
    ledger_entries: Iterable[LedgerEntry],
    *,
    logger: Logger | None = None,
) -> list[VirtualOccurrence]:
    """Project active rules into ``period`` as virtual occurrences.

    Rules realized by a linked ledger entry in the same month are skipped.
    The function has no side effects; identical inputs give identical output.

    Args:
        rules: Candidate rules; inactive ones are ignored.
        period: Target month.
        ledger_entries: Ledger snapshot used for deduplication.
        logger: Optional logger for debug traces.

    Returns:
        list[VirtualOccurrence]: Occurrences sorted by date then rule id.
    """
    realized = realized_rule_ids(ledger_entries, period)
    occurrences: list[VirtualOccurrence] = []
    for rule in rules:
        if not rule.active:
            continue
        due = rule.occurrence_date(period)
        if due is None:
            continue
        if rule.id in realized:
            if logger is not None:
                logger.debug(
                    f"Rule {rule.id} already realized for {period}"
                )
            continue
        occurrences.append(VirtualOccurrence.from_rule(rule, due))
    return sorted(
        occurrences,
        key=lambda item: (item.occurrence_date, item.rule_id),
    )


def materialize_range(
    rules: Iterable[RecurringRule],
    periods: Iterable[Period],
    ledger_entries: Iterable[LedgerEntry],
) -> list[VirtualOccurrence]:
    """Materialize several months against one ledger snapshot."""
    rules = list(rules)
    entries = list(ledger_entries)
    occurrences: list[VirtualOccurrence] = []
    for period in periods:
        occurrences.extend(materialize_occurrences(rules, period, entries))
    return occurrences


__all__ = [
    "realized_rule_ids",
    "materialize_occurrences",
    "materialize_range",
]
