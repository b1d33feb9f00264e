"""Domain enumerations and constants."""

from enum import Enum


class RuleKind(str, Enum):
    """Kind of cash movement; sign is applied only at summation time."""

    INCOME = "income"
    EXPENSE = "expense"
    CARD_EXPENSE = "card_expense"

    @property
    def sign(self) -> int:
        return 1 if self is RuleKind.INCOME else -1

    @property
    def is_card(self) -> bool:
        return self is RuleKind.CARD_EXPENSE


class EntryStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class EntryOrigin(str, Enum):
    MANUAL = "manual"
    RECURRING = "recurring"
    RECURRING_ADJUSTMENT = "recurring_adjustment"
    RECURRING_SKIP = "recurring_skip"
    INVOICE = "invoice"
    RECURRING_VIRTUAL = "recurring_virtual"


class InvoiceStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    PAID = "paid"


class AdjustmentMode(str, Enum):
    THIS_MONTH_ONLY = "this_month_only"
    FROM_NOW_ON = "from_now_on"
    SKIP_THIS_MONTH = "skip_this_month"


# Origins that count as "the obligation was realized for that month".
REALIZING_ORIGINS = frozenset(
    {
        EntryOrigin.RECURRING,
        EntryOrigin.RECURRING_ADJUSTMENT,
        EntryOrigin.RECURRING_SKIP,
    }
)

# Invoices whose billing window subsumes itemized card charges.
COVERING_INVOICE_STATUSES = frozenset(
    {InvoiceStatus.CLOSED, InvoiceStatus.PAID}
)

MIN_DESCRIPTION_LENGTH = 2


__all__ = [
    "RuleKind",
    "EntryStatus",
    "EntryOrigin",
    "InvoiceStatus",
    "AdjustmentMode",
    "REALIZING_ORIGINS",
    "COVERING_INVOICE_STATUSES",
    "MIN_DESCRIPTION_LENGTH",
]
