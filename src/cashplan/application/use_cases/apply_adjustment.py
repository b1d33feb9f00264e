"""Use case for the three recurring adjustment workflows."""

from dataclasses import replace
from decimal import Decimal

from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.constants import AdjustmentMode, EntryOrigin, EntryStatus
from cashplan.domain.errors import (
    DuplicateRealizationError,
    NotFoundError,
    ValidationError,
)
from cashplan.domain.models import (
    AdjustmentResult,
    ChangeEvent,
    ChangeSubtype,
    ChangeType,
    EntityKind,
    LedgerEntry,
    Period,
    RecurringRule,
)
from cashplan.domain.services.validation import (
    parse_adjustment_mode,
    validate_positive_amount,
)
from cashplan.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from cashplan.utils.decimal_utils import ZERO


class ApplyAdjustmentUseCase:
    """Override one month, change the rule going forward, or skip a month.

    ``this_month_only`` and ``skip_this_month`` write a realizing ledger
    entry for the month and leave the rule alone. ``from_now_on`` changes
    the rule amount and never touches the ledger.
    """

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
        usage_logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            rule_repository: Port reading and updating recurring rules.
            ledger_repository: Port persisting realizations.
            notifier: Optional change bus notified after writes.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording user actions.
        """
        self._rule_repository = rule_repository
        self._ledger_repository = ledger_repository
        self._notifier = notifier
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()

    def execute(
        self,
        owner_id: str,
        mode: AdjustmentMode | str,
        rule_id: int,
        period: Period,
        amount=None,
        note: str | None = None,
    ) -> AdjustmentResult:
        """Apply an adjustment.

        Args:
            owner_id: Owner of the rule.
            mode: Adjustment mode.
            rule_id: Rule being adjusted.
            period: Month the adjustment applies to (or starts from).
            amount: New amount; required and positive except for skips.
            note: Optional note stored on the entry or the rule.

        Returns:
            AdjustmentResult: Resulting rule and entry (if one was written).

        Raises:
            ValidationError: On invalid mode or amount, a rule not in effect
                that month, or a month already confirmed as-is.
            NotFoundError: If the rule does not exist for this owner.
        """
        mode = parse_adjustment_mode(mode)
        if mode is not AdjustmentMode.SKIP_THIS_MONTH:
            amount = validate_positive_amount(amount)
        rule = self._rule_repository.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)

        if mode is AdjustmentMode.FROM_NOW_ON:
            updated = self._rule_repository.update_amount(
                owner_id,
                rule_id,
                amount,
                note,
            )
            self._logger.info(
                f"Rule {rule_id} amount changed from {rule.amount} to "
                f"{updated.amount} starting {period}"
            )
            self._usage_logger.info(
                f"adjust owner={owner_id} rule={rule_id} mode={mode.value} "
                f"period={period}"
            )
            self._publish(rule, EntityKind.RULE, rule.id)
            return AdjustmentResult(mode=mode, rule=updated)

        entry = self._build_entry(mode, rule, period, amount, note)
        stored = self._store(entry, period)
        self._logger.info(
            f"Applied {mode.value} to rule {rule_id} for {period} "
            f"(entry {stored.id}, amount {stored.amount})"
        )
        self._usage_logger.info(
            f"adjust owner={owner_id} rule={rule_id} mode={mode.value} "
            f"period={period}"
        )
        self._publish(rule, EntityKind.LEDGER_ENTRY, stored.id)
        return AdjustmentResult(mode=mode, rule=rule, entry=stored)

    def _build_entry(
        self,
        mode: AdjustmentMode,
        rule: RecurringRule,
        period: Period,
        amount: Decimal | None,
        note: str | None,
    ) -> LedgerEntry:
        occurrence_date = rule.occurrence_date(period)
        if occurrence_date is None:
            raise ValidationError(
                f"Recurring rule {rule.id} is not in effect in {period}"
            )
        if mode is AdjustmentMode.SKIP_THIS_MONTH:
            return LedgerEntry(
                id=None,
                owner_id=rule.owner_id,
                description=rule.description,
                amount=ZERO,
                entry_date=occurrence_date,
                kind=rule.kind,
                status=EntryStatus.CONFIRMED,
                origin=EntryOrigin.RECURRING_SKIP,
                category_id=rule.category_id,
                account_id=rule.account_id,
                card_id=rule.card_id,
                rule_id=rule.id,
                note=note or f"Skipped for {period}",
            )
        return LedgerEntry(
            id=None,
            owner_id=rule.owner_id,
            description=rule.description,
            amount=amount,
            entry_date=occurrence_date,
            kind=rule.kind,
            status=EntryStatus.PENDING,
            origin=EntryOrigin.RECURRING_ADJUSTMENT,
            category_id=rule.category_id,
            account_id=rule.account_id,
            card_id=rule.card_id,
            rule_id=rule.id,
            note=note or f"Adjusted for {period} (rule amount {rule.amount})",
        )

    def _store(self, entry: LedgerEntry, period: Period) -> LedgerEntry:
        existing = self._ledger_repository.find_realization(
            entry.owner_id,
            entry.rule_id,
            period,
        )
        if existing is None:
            try:
                return self._ledger_repository.create(entry)
            except DuplicateRealizationError:
                existing = self._ledger_repository.find_realization(
                    entry.owner_id,
                    entry.rule_id,
                    period,
                )
                if existing is None:
                    raise
        if (
            existing.origin is EntryOrigin.RECURRING
            and existing.status is EntryStatus.CONFIRMED
        ):
            raise ValidationError(
                f"Recurring rule {entry.rule_id} is already confirmed "
                f"for {period}"
            )
        self._logger.info(
            f"Replacing {existing.origin.value} entry {existing.id} "
            f"for rule {entry.rule_id} in {period}"
        )
        return self._ledger_repository.replace_realization(
            replace(entry, id=existing.id)
        )

    def _publish(
        self,
        rule: RecurringRule,
        entity: EntityKind,
        entity_id: int | None,
    ) -> None:
        if self._notifier is None:
            return
        self._notifier.publish(
            ChangeEvent(
                change_type=ChangeType.UPDATE,
                subtype=ChangeSubtype.RECURRING,
                entity=entity,
                affected_ids=(entity_id,) if entity_id is not None else (),
                owner_id=rule.owner_id,
                account_ids=(
                    (rule.account_id,) if rule.account_id is not None else ()
                ),
            )
        )


__all__ = ["ApplyAdjustmentUseCase"]
