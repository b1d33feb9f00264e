"""Port for card invoice persistence."""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Protocol

from cashplan.domain.constants import InvoiceStatus
from cashplan.domain.models import Invoice, Period


class InvoiceRepositoryPort(Protocol):
    """Port exposing invoice reads and lifecycle transitions."""

    def list_invoices(
        self,
        owner_id: str,
        *,
        statuses: Iterable[InvoiceStatus] | None = None,
        card_id: int | None = None,
        closing_until: date | None = None,
        due_until: date | None = None,
        window_overlaps: Period | None = None,
    ) -> list[Invoice]:
        """Return invoices matching every given filter."""

    def get(self, owner_id: str, invoice_id: int) -> Invoice | None:
        """Return one invoice or None."""

    def create(self, invoice: Invoice) -> Invoice:
        """Insert an invoice and return it with its id."""

    def close(
        self,
        owner_id: str,
        invoice_id: int,
        total_amount: Decimal,
    ) -> Invoice:
        """Freeze the total and move an open invoice to closed."""

    def mark_paid(
        self,
        owner_id: str,
        invoice_id: int,
        paid_entry_id: int,
    ) -> Invoice:
        """Move a closed invoice to paid, linking its payment entry."""


__all__ = ["InvoiceRepositoryPort"]
