"""Application ports package."""

from .database import DatabaseEnginePort
from .invoice_repository import InvoiceRepositoryPort
from .ledger_repository import LedgerRepositoryPort
from .notifier import ChangeNotifierPort
from .period_totals import PeriodTotalsFunctionPort
from .reference_repository import ReferenceRepositoryPort
from .rule_repository import RecurringRuleRepositoryPort

__all__ = [
    "ChangeNotifierPort",
    "DatabaseEnginePort",
    "InvoiceRepositoryPort",
    "LedgerRepositoryPort",
    "PeriodTotalsFunctionPort",
    "RecurringRuleRepositoryPort",
    "ReferenceRepositoryPort",
]
