"""Derived balance and indicator models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from cashplan.domain.constants import AdjustmentMode, EntryStatus, RuleKind
from cashplan.domain.errors import AutoCloseFailure, PartialComputationError
from cashplan.domain.models.invoices import Invoice
from cashplan.domain.models.ledger import LedgerEntry
from cashplan.domain.models.period import Period
from cashplan.domain.models.rules import RecurringRule


@dataclass(frozen=True)
class PeriodTotalsRow:
    """Aggregated ledger amount for one (kind, status) pair."""

    kind: RuleKind
    status: EntryStatus
    total: Decimal


@dataclass(frozen=True)
class LedgerTotals:
    """Confirmed and pending income/expense magnitudes."""

    confirmed_income: Decimal = Decimal("0")
    confirmed_expense: Decimal = Decimal("0")
    pending_income: Decimal = Decimal("0")
    pending_expense: Decimal = Decimal("0")


@dataclass(frozen=True)
class BalanceIndicators:
    """Consolidated indicators for one owner (or account) and month."""

    period: Period
    account_id: int | None
    opening_balance: Decimal
    confirmed_income: Decimal
    confirmed_expense: Decimal
    pending_income: Decimal
    pending_expense: Decimal
    projected_recurring_income: Decimal
    projected_recurring_expense: Decimal
    total_income: Decimal
    total_expense: Decimal
    net_flow: Decimal
    savings_rate: Decimal
    projected_end_balance: Decimal
    partial: bool = False
    failures: list[PartialComputationError] = field(default_factory=list)


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balance across a set of accounts at a date."""

    as_of: date
    total: Decimal
    per_account: dict[int, Decimal]
    partial: bool = False
    failures: list[PartialComputationError] = field(default_factory=list)


@dataclass(frozen=True)
class AutoCloseResult:
    closed: list[Invoice]
    failures: list[AutoCloseFailure] = field(default_factory=list)

    @property
    def closed_count(self) -> int:
        return len(self.closed)


@dataclass(frozen=True)
class AdjustmentResult:
    """Outcome of an adjustment: the rule and the entry it produced, if any."""

    mode: AdjustmentMode
    rule: RecurringRule
    entry: LedgerEntry | None = None


@dataclass(frozen=True)
class RuleStats:
    active_count: int
    inactive_count: int
    monthly_income: Decimal
    monthly_expense: Decimal

    @property
    def monthly_flow(self) -> Decimal:
        return self.monthly_income - self.monthly_expense


__all__ = [
    "PeriodTotalsRow",
    "LedgerTotals",
    "BalanceIndicators",
    "BalanceSnapshot",
    "AutoCloseResult",
    "AdjustmentResult",
    "RuleStats",
]
