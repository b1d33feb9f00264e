"""Port for recurring rule persistence."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from cashplan.domain.constants import RuleKind
from cashplan.domain.models import Period, RecurringRule


class RecurringRuleRepositoryPort(Protocol):
    """Port exposing CRUD over recurring rules.

    Every method is scoped by ``owner_id``; rules of other owners behave as
    missing. Implementations raise ``DataAccessError`` on store failures.
    """

    def get(self, owner_id: str, rule_id: int) -> RecurringRule | None:
        """Return one rule or None when missing or foreign."""

    def list_rules(
        self,
        owner_id: str,
        *,
        active_only: bool = False,
        period: Period | None = None,
        card_id: int | None = None,
    ) -> list[RecurringRule]:
        """Return rules, optionally limited to those overlapping a month."""

    def create(
        self,
        owner_id: str,
        *,
        description: str,
        amount: Decimal,
        kind: RuleKind,
        category_id: int | None,
        account_id: int | None,
        card_id: int | None,
        day_of_month: int,
        start_date: date,
        end_date: date | None = None,
        note: str | None = None,
    ) -> RecurringRule:
        """Insert a new active rule and return it."""

    def update(self, rule: RecurringRule) -> RecurringRule:
        """Persist every mutable field of ``rule``."""

    def update_amount(
        self,
        owner_id: str,
        rule_id: int,
        amount: Decimal,
        note: str | None = None,
    ) -> RecurringRule:
        """Change the rule amount (and note when given)."""

    def set_active(
        self,
        owner_id: str,
        rule_id: int,
        active: bool,
    ) -> RecurringRule:
        """Toggle the soft-deactivation flag."""

    def delete(self, owner_id: str, rule_id: int) -> None:
        """Remove the rule; linked ledger entries keep their rule_id."""


__all__ = ["RecurringRuleRepositoryPort"]
