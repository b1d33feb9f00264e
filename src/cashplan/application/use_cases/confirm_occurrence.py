"""Use case to confirm a recurring occurrence into the ledger."""

from collections.abc import Callable
from datetime import date

from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.constants import EntryOrigin, EntryStatus
from cashplan.domain.errors import (
    DuplicateRealizationError,
    NotFoundError,
    ValidationError,
)
from cashplan.domain.models import (
    ChangeEvent,
    ChangeSubtype,
    ChangeType,
    EntityKind,
    LedgerEntry,
    Period,
    RecurringRule,
)
from cashplan.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)

DEFAULT_CONFIRMATION_NOTE = "Recurring transaction confirmed"


class ConfirmOccurrenceUseCase:
    """Turn a virtual occurrence into a confirmed ledger entry.

    Confirmation is idempotent per (rule, month): an existing realization
    is reused, so repeated calls never create a second entry.
    """

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
        usage_logger=None,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the use case.

        Args:
            rule_repository: Port providing recurring rules.
            ledger_repository: Port persisting ledger entries.
            notifier: Optional change bus notified after writes.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording user actions.
            today_provider: Clock used when no target date is given.
        """
        self._rule_repository = rule_repository
        self._ledger_repository = ledger_repository
        self._notifier = notifier
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._today_provider = today_provider

    def execute(
        self,
        owner_id: str,
        rule_id: int,
        target_date: date | None = None,
    ) -> LedgerEntry:
        """Confirm the rule's occurrence for the month of ``target_date``.

        Args:
            owner_id: Owner of the rule.
            rule_id: Rule to confirm.
            target_date: Entry date; defaults to today.

        Returns:
            LedgerEntry: The confirmed realization for that month.

        Raises:
            NotFoundError: If the rule does not exist for this owner.
            ValidationError: If the rule is inactive or not in effect in
                the month of the entry date.
        """
        rule = self._rule_repository.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)
        if not rule.active:
            raise ValidationError(f"Recurring rule {rule_id} is inactive")

        entry_date = target_date or self._today_provider()
        period = Period.from_date(entry_date)
        if rule.occurrence_date(period) is None:
            raise ValidationError(
                f"Recurring rule {rule_id} is not in effect in {period}"
            )
        existing = self._ledger_repository.find_realization(
            owner_id,
            rule_id,
            period,
        )
        if existing is not None:
            return self._reuse(rule, existing)

        entry = LedgerEntry(
            id=None,
            owner_id=owner_id,
            description=rule.description,
            amount=rule.amount,
            entry_date=entry_date,
            kind=rule.kind,
            status=EntryStatus.CONFIRMED,
            origin=EntryOrigin.RECURRING,
            category_id=rule.category_id,
            account_id=rule.account_id,
            card_id=rule.card_id,
            rule_id=rule.id,
            note=rule.note or DEFAULT_CONFIRMATION_NOTE,
        )
        try:
            created = self._ledger_repository.create(entry)
        except DuplicateRealizationError:
            self._logger.warning(
                f"Concurrent confirmation of rule {rule_id} for {period}; "
                "reusing the stored realization"
            )
            winner = self._ledger_repository.find_realization(
                owner_id,
                rule_id,
                period,
            )
            if winner is None:
                raise
            return self._reuse(rule, winner)

        self._logger.info(
            f"Confirmed rule {rule_id} for {period} as entry {created.id}"
        )
        self._usage_logger.info(
            f"confirm owner={owner_id} rule={rule_id} period={period}"
        )
        self._publish(rule, created)
        return created

    def _reuse(self, rule: RecurringRule, existing: LedgerEntry) -> LedgerEntry:
        if existing.status is EntryStatus.CONFIRMED:
            self._logger.info(
                f"Rule {rule.id} already confirmed as entry {existing.id}"
            )
            return existing
        promoted = self._ledger_repository.update_status(
            existing.owner_id,
            existing.id,
            EntryStatus.CONFIRMED,
        )
        self._logger.info(
            f"Promoted pending entry {existing.id} of rule {rule.id} "
            "to confirmed"
        )
        self._publish(rule, promoted)
        return promoted

    def _publish(self, rule: RecurringRule, entry: LedgerEntry) -> None:
        if self._notifier is None:
            return
        self._notifier.publish(
            ChangeEvent(
                change_type=ChangeType.CONFIRM,
                subtype=ChangeSubtype.RECURRING,
                entity=EntityKind.LEDGER_ENTRY,
                affected_ids=(entry.id,),
                owner_id=entry.owner_id,
                account_ids=(
                    (rule.account_id,) if rule.account_id is not None else ()
                ),
            )
        )


__all__ = ["ConfirmOccurrenceUseCase", "DEFAULT_CONFIRMATION_NOTE"]
