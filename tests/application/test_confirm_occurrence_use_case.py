"""Tests for ConfirmOccurrenceUseCase."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cashplan.application.use_cases.confirm_occurrence import (
    DEFAULT_CONFIRMATION_NOTE,
    ConfirmOccurrenceUseCase,
)
from cashplan.domain.constants import EntryOrigin, EntryStatus
from cashplan.domain.errors import (
    DuplicateRealizationError,
    NotFoundError,
    ValidationError,
)
from cashplan.domain.models import ChangeSubtype, ChangeType, EntityKind, Period
from cashplan.domain.services.materializer import materialize_occurrences


def _use_case(rule_repository, ledger_repository, notifier=None, **kwargs):
    return ConfirmOccurrenceUseCase(
        rule_repository,
        ledger_repository,
        notifier=notifier,
        logger=MagicMock(),
        usage_logger=MagicMock(),
        **kwargs,
    )


def test_confirm_creates_confirmed_recurring_entry(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
    notifier,
) -> None:
    rule_repository.rules[1] = rule_factory()
    use_case = _use_case(rule_repository, ledger_repository, notifier)

    entry = use_case.execute(owner, 1, date(2024, 3, 5))

    assert entry.id is not None
    assert entry.status is EntryStatus.CONFIRMED
    assert entry.origin is EntryOrigin.RECURRING
    assert entry.rule_id == 1
    assert entry.amount == Decimal("1000.00")
    assert entry.note == DEFAULT_CONFIRMATION_NOTE
    assert entry.realized_period == Period(2024, 3)
    event = notifier.events[0]
    assert event.change_type is ChangeType.CONFIRM
    assert event.subtype is ChangeSubtype.RECURRING
    assert event.entity is EntityKind.LEDGER_ENTRY
    assert event.affected_ids == (entry.id,)
    assert event.account_ids == (1,)


def test_confirm_is_idempotent_per_month(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
    notifier,
) -> None:
    """Confirming March twice yields one entry and no March virtual."""
    rule = rule_factory(note="Landlord")
    rule_repository.rules[1] = rule
    use_case = _use_case(rule_repository, ledger_repository, notifier)

    first = use_case.execute(owner, 1, date(2024, 3, 5))
    second = use_case.execute(owner, 1, date(2024, 3, 20))

    assert second == first
    assert len(ledger_repository.entries) == 1
    assert first.note == "Landlord"
    assert len(notifier.events) == 1
    remaining = materialize_occurrences(
        [rule],
        Period(2024, 3),
        ledger_repository.entries.values(),
    )
    assert remaining == []


def test_confirm_defaults_to_today(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
) -> None:
    rule_repository.rules[1] = rule_factory()
    use_case = _use_case(
        rule_repository,
        ledger_repository,
        today_provider=lambda: date(2024, 6, 7),
    )

    entry = use_case.execute(owner, 1)

    assert entry.entry_date == date(2024, 6, 7)


def test_confirm_promotes_pending_adjustment(
    owner,
    rule_factory,
    entry_factory,
    rule_repository,
    ledger_repository,
    notifier,
) -> None:
    rule_repository.rules[1] = rule_factory()
    pending = entry_factory(
        id=40,
        rule_id=1,
        amount=Decimal("900"),
        entry_date=date(2024, 3, 5),
        status=EntryStatus.PENDING,
        origin=EntryOrigin.RECURRING_ADJUSTMENT,
    )
    ledger_repository.entries[40] = pending
    use_case = _use_case(rule_repository, ledger_repository, notifier)

    entry = use_case.execute(owner, 1, date(2024, 3, 5))

    assert entry.id == 40
    assert entry.status is EntryStatus.CONFIRMED
    assert entry.amount == Decimal("900")
    assert len(ledger_repository.entries) == 1
    assert notifier.events[0].affected_ids == (40,)


def test_confirm_rejects_missing_and_inactive_rules(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
) -> None:
    rule_repository.rules[1] = rule_factory(active=False)
    rule_repository.rules[2] = rule_factory(id=2, owner_id="someone-else")
    use_case = _use_case(rule_repository, ledger_repository)

    with pytest.raises(ValidationError, match="inactive"):
        use_case.execute(owner, 1, date(2024, 3, 5))
    with pytest.raises(NotFoundError):
        use_case.execute(owner, 2, date(2024, 3, 5))
    with pytest.raises(NotFoundError):
        use_case.execute(owner, 99, date(2024, 3, 5))
    assert ledger_repository.entries == {}


@pytest.mark.parametrize(
    "target",
    [date(2023, 12, 5), date(2024, 7, 5)],
    ids=["before-start", "after-end"],
)
def test_confirm_rejects_months_outside_rule_bounds(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
    notifier,
    target,
) -> None:
    rule_repository.rules[1] = rule_factory(end_date=date(2024, 6, 30))
    use_case = _use_case(rule_repository, ledger_repository, notifier)

    with pytest.raises(ValidationError, match="not in effect"):
        use_case.execute(owner, 1, target)
    assert ledger_repository.entries == {}
    assert notifier.events == []


def test_concurrent_confirmation_reuses_winner(
    owner,
    rule_factory,
    entry_factory,
    rule_repository,
) -> None:
    """A lost insert race returns the entry the other writer stored."""
    rule_repository.rules[1] = rule_factory()
    winner = entry_factory(
        id=77,
        rule_id=1,
        entry_date=date(2024, 3, 5),
        origin=EntryOrigin.RECURRING,
    )
    ledger_repository = MagicMock()
    ledger_repository.find_realization.side_effect = [None, winner]
    ledger_repository.create.side_effect = DuplicateRealizationError(
        1,
        "2024-03",
    )
    logger = MagicMock()
    use_case = ConfirmOccurrenceUseCase(
        rule_repository,
        ledger_repository,
        logger=logger,
        usage_logger=MagicMock(),
    )

    entry = use_case.execute(owner, 1, date(2024, 3, 5))

    assert entry is winner
    logger.warning.assert_called_once()
    ledger_repository.update_status.assert_not_called()


def test_usage_log_records_confirmation(
    owner,
    rule_factory,
    rule_repository,
    ledger_repository,
) -> None:
    rule_repository.rules[1] = rule_factory()
    usage_logger = MagicMock()
    use_case = ConfirmOccurrenceUseCase(
        rule_repository,
        ledger_repository,
        logger=MagicMock(),
        usage_logger=usage_logger,
    )

    use_case.execute(owner, 1, date(2024, 3, 5))

    usage_logger.info.assert_called_once_with(
        f"confirm owner={owner} rule=1 period=2024-03"
    )
