"""Card invoice window and total computation."""

from collections.abc import Iterable
from datetime import date, timedelta
from decimal import Decimal

from cashplan.domain.models import (
    Card,
    Invoice,
    LedgerEntry,
    Period,
    VirtualOccurrence,
)
from cashplan.utils.decimal_utils import ZERO, to_money


def invoice_window(closing_day: int, period: Period) -> tuple[date, date]:
    """Return the billing window of the invoice referenced by ``period``.

    With a closing day of 10, the October invoice covers purchases from
    September 11 to October 10. Closing days beyond the month length are
    clamped to the last day.

    Args:
        closing_day: Card closing day, 1 to 31.
        period: Invoice reference month.

    Returns:
        tuple[date, date]: First and last day of the billing window.
    """
    closing = period.clamp_day(closing_day)
    previous_closing = period.previous().clamp_day(closing_day)
    return previous_closing + timedelta(days=1), closing


def invoice_due_date(card: Card, period: Period) -> date:
    """Return the due date of the invoice referenced by ``period``.

    A due day earlier than the closing day falls in the following month.
    """
    if card.due_day > card.closing_day:
        return period.clamp_day(card.due_day)
    return period.next().clamp_day(card.due_day)


def new_invoice(card: Card, period: Period) -> Invoice:
    """Build an unsaved open invoice for ``card`` and ``period``."""
    opening, closing = invoice_window(card.closing_day, period)
    return Invoice(
        id=None,
        owner_id=card.owner_id,
        card_id=card.id,
        period=period,
        opening_date=opening,
        closing_date=closing,
        due_date=invoice_due_date(card, period),
    )


def compute_invoice_total(
    invoice: Invoice,
    card_entries: Iterable[LedgerEntry],
    occurrences: Iterable[VirtualOccurrence] = (),
) -> Decimal:
    """Sum card charges inside the invoice window.

    Args:
        invoice: Invoice whose window bounds the charges.
        card_entries: Ledger entries to consider; other cards, non-card
            kinds and dates outside the window are ignored.
        occurrences: Still-virtual recurring card charges to include.

    Returns:
        Decimal: Total quantized to cents.
    """
    total = ZERO
    for entry in card_entries:
        if (
            entry.kind.is_card
            and entry.card_id == invoice.card_id
            and invoice.window_contains(entry.entry_date)
        ):
            total += entry.amount
    for occurrence in occurrences:
        if (
            occurrence.kind.is_card
            and occurrence.card_id == invoice.card_id
            and invoice.window_contains(occurrence.occurrence_date)
        ):
            total += occurrence.amount
    return to_money(total)


__all__ = [
    "invoice_window",
    "invoice_due_date",
    "new_invoice",
    "compute_invoice_total",
]
