"""Card invoice model."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashplan.domain.constants import COVERING_INVOICE_STATUSES, InvoiceStatus
from cashplan.domain.models.period import Period


@dataclass(frozen=True)
class Invoice:
    """A card billing period.

    Attributes:
        id: Invoice identifier.
        owner_id: Owning user.
        card_id: Card billed.
        period: Reference month of the invoice.
        opening_date: First day of the billing window.
        closing_date: Last day of the billing window.
        due_date: Payment due date.
        status: Open, closed or paid.
        total_amount: Frozen total once closed.
        paid_entry_id: Ledger entry created by the payment.
    """

    id: int | None
    owner_id: str
    card_id: int
    period: Period
    opening_date: date
    closing_date: date
    due_date: date
    status: InvoiceStatus = InvoiceStatus.OPEN
    total_amount: Decimal = Decimal("0")
    paid_entry_id: int | None = None

    def window_contains(self, value: date) -> bool:
        return self.opening_date <= value <= self.closing_date

    def covers(self, card_id: int | None, value: date) -> bool:
        """Whether a card charge on ``value`` is subsumed by this invoice."""
        return (
            self.status in COVERING_INVOICE_STATUSES
            and card_id is not None
            and card_id == self.card_id
            and self.window_contains(value)
        )

    @property
    def window_periods(self) -> list[Period]:
        return Period.range(
            Period.from_date(self.opening_date),
            Period.from_date(self.closing_date),
        )


__all__ = ["Invoice"]
