"""Domain services package."""

from .balances import (
    build_indicators,
    savings_rate,
    signed,
    sum_signed,
    totals_from_rows,
    totals_from_transactions,
)
from .invoicing import (
    compute_invoice_total,
    invoice_due_date,
    invoice_window,
    new_invoice,
)
from .materializer import (
    materialize_occurrences,
    materialize_range,
    realized_rule_ids,
)
from .reconciliation import (
    covering_invoice,
    merge_month,
    select_single_realizations,
)
from .validation import (
    parse_adjustment_mode,
    parse_kind,
    validate_day_of_month,
    validate_positive_amount,
    validate_rule_fields,
    validate_target,
)

__all__ = [
    "build_indicators",
    "compute_invoice_total",
    "covering_invoice",
    "invoice_due_date",
    "invoice_window",
    "materialize_occurrences",
    "materialize_range",
    "merge_month",
    "new_invoice",
    "parse_adjustment_mode",
    "parse_kind",
    "realized_rule_ids",
    "savings_rate",
    "select_single_realizations",
    "signed",
    "sum_signed",
    "totals_from_rows",
    "totals_from_transactions",
    "validate_day_of_month",
    "validate_positive_amount",
    "validate_rule_fields",
    "validate_target",
]
