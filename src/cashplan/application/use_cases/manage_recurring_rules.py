"""Use case for recurring rule management."""

from dataclasses import replace
from datetime import date

from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.constants import RuleKind
from cashplan.domain.errors import NotFoundError, ValidationError
from cashplan.domain.models import (
    ChangeEvent,
    ChangeSubtype,
    ChangeType,
    EntityKind,
    RecurringRule,
    RuleStats,
)
from cashplan.domain.services.validation import validate_rule_fields
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.utils.decimal_utils import ZERO, to_money

_MUTABLE_FIELDS = {
    "description",
    "amount",
    "kind",
    "category_id",
    "account_id",
    "card_id",
    "day_of_month",
    "start_date",
    "end_date",
    "note",
}


def _reject_unknown(fields) -> None:
    if fields:
        raise ValidationError(
            f"Unknown rule fields: {', '.join(sorted(fields))}"
        )


class ManageRecurringRulesUseCase:
    """Create, update, toggle, delete and summarize recurring rules."""

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            rule_repository: Port persisting recurring rules.
            notifier: Optional change bus notified after writes.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._rule_repository = rule_repository
        self._notifier = notifier
        self._logger = logger or get_app_logger()

    def list_rules(
        self,
        owner_id: str,
        active_only: bool = False,
    ) -> list[RecurringRule]:
        return self._rule_repository.list_rules(
            owner_id,
            active_only=active_only,
        )

    def create(
        self,
        owner_id: str,
        /,
        *,
        description: str,
        amount,
        kind: RuleKind | str,
        day_of_month: int,
        start_date: date,
        category_id: int | None = None,
        account_id: int | None = None,
        card_id: int | None = None,
        end_date: date | None = None,
        note: str | None = None,
        **unknown,
    ) -> RecurringRule:
        """Validate and persist a new active rule.

        Raises:
            ValidationError: On unknown fields or the first invalid field.
        """
        _reject_unknown(unknown)
        kind, amount = validate_rule_fields(
            description=description,
            amount=amount,
            kind=kind,
            account_id=account_id,
            card_id=card_id,
            day_of_month=day_of_month,
            start_date=start_date,
            end_date=end_date,
        )
        rule = self._rule_repository.create(
            owner_id,
            description=description.strip(),
            amount=amount,
            kind=kind,
            category_id=category_id,
            account_id=account_id,
            card_id=card_id,
            day_of_month=day_of_month,
            start_date=start_date,
            end_date=end_date,
            note=note,
        )
        self._logger.info(
            f"Created recurring rule {rule.id} ({kind.value}, {amount})"
        )
        self._publish(ChangeType.CREATE, rule)
        return rule

    def update(
        self,
        owner_id: str,
        rule_id: int,
        /,
        **changes,
    ) -> RecurringRule:
        """Apply field changes to a rule after validating the result.

        Args:
            owner_id: Rule owner.
            rule_id: Rule to update.
            **changes: New values for any mutable field.

        Returns:
            RecurringRule: The stored rule.

        Raises:
            NotFoundError: If the rule does not exist for this owner.
            ValidationError: On unknown or invalid fields.
        """
        _reject_unknown(set(changes) - _MUTABLE_FIELDS)
        rule = self._get(owner_id, rule_id)
        merged = replace(rule, **changes)
        kind, amount = validate_rule_fields(
            description=merged.description,
            amount=merged.amount,
            kind=merged.kind,
            account_id=merged.account_id,
            card_id=merged.card_id,
            day_of_month=merged.day_of_month,
            start_date=merged.start_date,
            end_date=merged.end_date,
        )
        stored = self._rule_repository.update(
            replace(merged, kind=kind, amount=amount)
        )
        self._logger.info(
            f"Updated recurring rule {rule_id}: {', '.join(sorted(changes))}"
        )
        self._publish(ChangeType.UPDATE, stored)
        return stored

    def set_active(
        self,
        owner_id: str,
        rule_id: int,
        active: bool,
    ) -> RecurringRule:
        self._get(owner_id, rule_id)
        stored = self._rule_repository.set_active(owner_id, rule_id, active)
        self._logger.info(
            f"Recurring rule {rule_id} "
            f"{'activated' if active else 'deactivated'}"
        )
        self._publish(ChangeType.UPDATE, stored)
        return stored

    def delete(self, owner_id: str, rule_id: int) -> None:
        rule = self._get(owner_id, rule_id)
        self._rule_repository.delete(owner_id, rule_id)
        self._logger.info(f"Deleted recurring rule {rule_id}")
        self._publish(ChangeType.DELETE, rule)

    def stats(self, owner_id: str) -> RuleStats:
        """Summarize active and inactive rules.

        Card expenses count as fixed expenses.

        Returns:
            RuleStats: Counts and monthly fixed income and expense.
        """
        rules = self._rule_repository.list_rules(owner_id)
        active = [rule for rule in rules if rule.active]
        income = sum(
            (rule.amount for rule in active if rule.kind is RuleKind.INCOME),
            ZERO,
        )
        expense = sum(
            (
                rule.amount
                for rule in active
                if rule.kind is not RuleKind.INCOME
            ),
            ZERO,
        )
        return RuleStats(
            active_count=len(active),
            inactive_count=len(rules) - len(active),
            monthly_income=to_money(income),
            monthly_expense=to_money(expense),
        )

    def _get(self, owner_id: str, rule_id: int) -> RecurringRule:
        rule = self._rule_repository.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)
        return rule

    def _publish(self, change_type: ChangeType, rule: RecurringRule) -> None:
        if self._notifier is None:
            return
        self._notifier.publish(
            ChangeEvent(
                change_type=change_type,
                subtype=ChangeSubtype.from_kind(rule.kind),
                entity=EntityKind.RULE,
                affected_ids=(rule.id,),
                owner_id=rule.owner_id,
                account_ids=(
                    (rule.account_id,) if rule.account_id is not None else ()
                ),
            )
        )


__all__ = ["ManageRecurringRulesUseCase"]
