"""Recurring rule and virtual occurrence models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashplan.domain.constants import EntryOrigin, EntryStatus, RuleKind
from cashplan.domain.models.period import Period


@dataclass(frozen=True)
class RecurringRule:
    """A monthly obligation.

    Attributes:
        id: Rule identifier.
        owner_id: Owning user.
        description: Label copied onto realized entries.
        amount: Positive magnitude.
        kind: Income, expense or card expense.
        category_id: Category reference.
        account_id: Target account, unset for card expenses.
        card_id: Target card, set only for card expenses.
        day_of_month: Due day, 1 to 31 (clamped in short months).
        start_date: First day the rule is in effect.
        end_date: Last day in effect, None when open ended.
        active: Soft-deactivation flag.
        note: Free text.
    """

    id: int
    owner_id: str
    description: str
    amount: Decimal
    kind: RuleKind
    category_id: int | None
    account_id: int | None
    card_id: int | None
    day_of_month: int
    start_date: date
    end_date: date | None = None
    active: bool = True
    note: str | None = None

    def is_in_effect(self, period: Period) -> bool:
        return period.overlaps(self.start_date, self.end_date)

    def occurrence_date(self, period: Period) -> date | None:
        """Return the due date in ``period`` or None when out of bounds."""
        if not self.is_in_effect(period):
            return None
        due = period.clamp_day(self.day_of_month)
        if due < self.start_date:
            return None
        if self.end_date is not None and due > self.end_date:
            return None
        return due


@dataclass(frozen=True, order=True)
class OccurrenceKey:
    """Composite identity of a virtual occurrence."""

    rule_id: int
    year: int
    month: int
    day: int

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)

    def __str__(self) -> str:
        return (
            f"virtual-{self.rule_id}-{self.year:04d}-"
            f"{self.month:02d}-{self.day:02d}"
        )


@dataclass(frozen=True)
class VirtualOccurrence:
    """Unpersisted projection of a rule into one month."""

    key: OccurrenceKey
    owner_id: str
    description: str
    amount: Decimal
    occurrence_date: date
    kind: RuleKind
    category_id: int | None
    account_id: int | None
    card_id: int | None
    note: str | None = None

    is_virtual = True
    status = EntryStatus.PENDING
    origin = EntryOrigin.RECURRING_VIRTUAL

    @property
    def rule_id(self) -> int:
        return self.key.rule_id

    @classmethod
    def from_rule(
        cls,
        rule: RecurringRule,
        occurrence_date: date,
    ) -> "VirtualOccurrence":
        return cls(
            key=OccurrenceKey(
                rule_id=rule.id,
                year=occurrence_date.year,
                month=occurrence_date.month,
                day=occurrence_date.day,
            ),
            owner_id=rule.owner_id,
            description=rule.description,
            amount=rule.amount,
            occurrence_date=occurrence_date,
            kind=rule.kind,
            category_id=rule.category_id,
            account_id=rule.account_id,
            card_id=rule.card_id,
            note=rule.note,
        )


__all__ = ["RecurringRule", "OccurrenceKey", "VirtualOccurrence"]
