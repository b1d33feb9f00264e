"""Balance and indicator arithmetic.

Amounts are stored as non-negative magnitudes tagged with a kind; the sign
is applied here, at summation time.
"""

from collections.abc import Iterable
from decimal import Decimal

from cashplan.domain.constants import EntryOrigin, EntryStatus, RuleKind
from cashplan.domain.models import (
    BalanceIndicators,
    LedgerEntry,
    LedgerTotals,
    MonthTransaction,
    Period,
    PeriodTotalsRow,
)
from cashplan.domain.errors import PartialComputationError
from cashplan.utils.decimal_utils import ZERO, to_money, to_rate


def signed(kind: RuleKind, amount: Decimal) -> Decimal:
    return amount * kind.sign


def sum_signed(entries: Iterable[LedgerEntry]) -> Decimal:
    """Sum entries with income positive and expenses negative."""
    return sum((entry.signed_amount for entry in entries), ZERO)


def savings_rate(net_flow: Decimal, income: Decimal) -> Decimal:
    """Return ``net_flow / income`` or 0 when there is no income."""
    if income == 0:
        return to_rate(ZERO)
    return to_rate(net_flow / income)


def totals_from_rows(rows: Iterable[PeriodTotalsRow]) -> LedgerTotals:
    """Fold (kind, status) aggregates into ledger totals.

    Card-expense rows are ignored; card spending is accounted through
    invoices or the uncovered-charge path.
    """
    buckets = {
        (RuleKind.INCOME, EntryStatus.CONFIRMED): ZERO,
        (RuleKind.EXPENSE, EntryStatus.CONFIRMED): ZERO,
        (RuleKind.INCOME, EntryStatus.PENDING): ZERO,
        (RuleKind.EXPENSE, EntryStatus.PENDING): ZERO,
    }
    for row in rows:
        slot = (row.kind, row.status)
        if slot in buckets:
            buckets[slot] += row.total
    return LedgerTotals(
        confirmed_income=buckets[(RuleKind.INCOME, EntryStatus.CONFIRMED)],
        confirmed_expense=buckets[(RuleKind.EXPENSE, EntryStatus.CONFIRMED)],
        pending_income=buckets[(RuleKind.INCOME, EntryStatus.PENDING)],
        pending_expense=buckets[(RuleKind.EXPENSE, EntryStatus.PENDING)],
    )


def totals_from_transactions(
    transactions: Iterable[MonthTransaction],
) -> LedgerTotals:
    """Local equivalent of the server-side period totals function."""
    rows = [
        PeriodTotalsRow(kind=item.kind, status=item.status, total=item.amount)
        for item in transactions
        if not item.is_virtual
        and item.entry_id is not None
        and not item.kind.is_card
    ]
    return totals_from_rows(rows)


def build_indicators(
    period: Period,
    transactions: list[MonthTransaction],
    ledger_totals: LedgerTotals,
    opening_balance: Decimal,
    *,
    account_id: int | None = None,
    failures: list[PartialComputationError] | None = None,
) -> BalanceIndicators:
    """Assemble consolidated indicators for a month.

    Args:
        period: Target month.
        transactions: Merged month view (already filtered by account).
        ledger_totals: Non-card ledger totals (server-side or local).
        opening_balance: Balance at the end of the previous month.
        account_id: Account the indicators are scoped to, if any.
        failures: Sub-fetch failures that make the result partial.

    Returns:
        BalanceIndicators: Totals, net flow, savings rate and projection.
    """
    confirmed_expense = ledger_totals.confirmed_expense
    pending_expense = ledger_totals.pending_expense
    projected_income = ZERO
    projected_expense = ZERO

    for item in transactions:
        if item.is_virtual:
            if item.kind is RuleKind.INCOME:
                projected_income += item.amount
            else:
                projected_expense += item.amount
            continue
        if item.origin is EntryOrigin.INVOICE and item.entry_id is None:
            pending_expense += item.amount
            continue
        if item.kind.is_card and item.covered_by_invoice_id is None:
            if item.status is EntryStatus.CONFIRMED:
                confirmed_expense += item.amount
            else:
                pending_expense += item.amount

    total_income = (
        ledger_totals.confirmed_income
        + ledger_totals.pending_income
        + projected_income
    )
    total_expense = confirmed_expense + pending_expense + projected_expense
    net_flow = total_income - total_expense
    failures = list(failures or [])
    return BalanceIndicators(
        period=period,
        account_id=account_id,
        opening_balance=to_money(opening_balance),
        confirmed_income=to_money(ledger_totals.confirmed_income),
        confirmed_expense=to_money(confirmed_expense),
        pending_income=to_money(ledger_totals.pending_income),
        pending_expense=to_money(pending_expense),
        projected_recurring_income=to_money(projected_income),
        projected_recurring_expense=to_money(projected_expense),
        total_income=to_money(total_income),
        total_expense=to_money(total_expense),
        net_flow=to_money(net_flow),
        savings_rate=savings_rate(net_flow, total_income),
        projected_end_balance=to_money(opening_balance + net_flow),
        partial=bool(failures),
        failures=failures,
    )


__all__ = [
    "signed",
    "sum_signed",
    "savings_rate",
    "totals_from_rows",
    "totals_from_transactions",
    "build_indicators",
]
