"""Application use cases package."""

from .apply_adjustment import ApplyAdjustmentUseCase
from .auto_close_invoices import AutoCloseInvoicesUseCase
from .calculate_balances import BalanceCalculator
from .confirm_occurrence import ConfirmOccurrenceUseCase
from .get_month_transactions import GetMonthTransactionsUseCase
from .invoice_totals import InvoiceTotals
from .manage_invoices import OpenInvoiceUseCase, PayInvoiceUseCase
from .manage_recurring_rules import ManageRecurringRulesUseCase
from .materialize_occurrences import MaterializeOccurrencesUseCase
from .project_months import ProjectMonthsUseCase

__all__ = [
    "ApplyAdjustmentUseCase",
    "AutoCloseInvoicesUseCase",
    "BalanceCalculator",
    "ConfirmOccurrenceUseCase",
    "GetMonthTransactionsUseCase",
    "InvoiceTotals",
    "ManageRecurringRulesUseCase",
    "MaterializeOccurrencesUseCase",
    "OpenInvoiceUseCase",
    "PayInvoiceUseCase",
    "ProjectMonthsUseCase",
]
