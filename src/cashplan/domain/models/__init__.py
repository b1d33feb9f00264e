"""Domain models package."""

from .events import ChangeEvent, ChangeSubtype, ChangeType, EntityKind
from .indicators import (
    AdjustmentResult,
    AutoCloseResult,
    BalanceIndicators,
    BalanceSnapshot,
    LedgerTotals,
    PeriodTotalsRow,
    RuleStats,
)
from .invoices import Invoice
from .ledger import Installment, LedgerEntry
from .period import Period
from .references import Account, Card, Category, ReferenceData
from .rules import OccurrenceKey, RecurringRule, VirtualOccurrence
from .transactions import MonthTransaction, MonthView

__all__ = [
    "Account",
    "AdjustmentResult",
    "AutoCloseResult",
    "BalanceIndicators",
    "BalanceSnapshot",
    "Card",
    "Category",
    "ChangeEvent",
    "ChangeSubtype",
    "ChangeType",
    "EntityKind",
    "Installment",
    "Invoice",
    "LedgerEntry",
    "LedgerTotals",
    "MonthTransaction",
    "MonthView",
    "OccurrenceKey",
    "Period",
    "PeriodTotalsRow",
    "RecurringRule",
    "ReferenceData",
    "RuleStats",
    "VirtualOccurrence",
]
