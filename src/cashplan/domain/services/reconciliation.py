"""Merge of ledger entries, virtual occurrences and invoice liabilities."""

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from logging import Logger

from cashplan.domain.constants import EntryStatus, InvoiceStatus
from cashplan.domain.models import (
    Invoice,
    LedgerEntry,
    MonthTransaction,
    Period,
    ReferenceData,
    VirtualOccurrence,
)


def covering_invoice(
    card_id: int | None,
    charge_date: date,
    invoices: Iterable[Invoice],
) -> Invoice | None:
    """Return the closed or paid invoice subsuming a card charge, if any."""
    for invoice in invoices:
        if invoice.covers(card_id, charge_date):
            return invoice
    return None


def select_single_realizations(
    entries: Sequence[LedgerEntry],
    logger: Logger | None = None,
) -> list[LedgerEntry]:
    """Keep one realizing entry per (rule, month).

    Duplicates can only come from concurrent writes that bypassed the
    store constraint. Confirmed entries win over pending, then lowest id.
    """
    chosen: dict[tuple[int, str], LedgerEntry] = {}
    others: list[LedgerEntry] = []
    for entry in entries:
        if not entry.is_realization:
            others.append(entry)
            continue
        slot = (entry.rule_id, entry.realized_period.key)
        current = chosen.get(slot)
        if current is None:
            chosen[slot] = entry
            continue
        if logger is not None:
            logger.warning(
                f"Duplicate realization for rule {entry.rule_id} in "
                f"{slot[1]}: entries {current.id} and {entry.id}"
            )
        if _realization_rank(entry) < _realization_rank(current):
            chosen[slot] = entry
    return others + list(chosen.values())


def _realization_rank(entry: LedgerEntry) -> tuple[int, int]:
    confirmed_first = 0 if entry.status is EntryStatus.CONFIRMED else 1
    return confirmed_first, entry.id if entry.id is not None else 0


def merge_month(
    period: Period,
    entries: Iterable[LedgerEntry],
    occurrences: Iterable[VirtualOccurrence],
    invoices: Iterable[Invoice],
    *,
    references: ReferenceData | None = None,
    logger: Logger | None = None,
) -> list[MonthTransaction]:
    """Combine the month's sources into one chronological view.

    Args:
        period: Target month.
        entries: Ledger entries (any status); other months are dropped.
        occurrences: Virtual occurrences materialized for the month.
        invoices: Invoices relevant to the month; closed ones due in the
            month become liability rows, closed and paid ones subsume card
            charges inside their billing window.
        references: Optional lookup tables for display names.
        logger: Optional logger for invariant warnings.

    Returns:
        list[MonthTransaction]: Rows sorted by date, newest first.
    """
    invoices = list(invoices)
    month_entries = [
        entry for entry in entries if period.contains(entry.entry_date)
    ]
    month_entries = select_single_realizations(month_entries, logger)
    rows: list[MonthTransaction] = []

    for entry in month_entries:
        row = MonthTransaction.from_entry(entry)
        if entry.kind.is_card:
            invoice = covering_invoice(
                entry.card_id,
                entry.entry_date,
                invoices,
            )
            if invoice is not None:
                row = replace(row, covered_by_invoice_id=invoice.id)
        rows.append(row)

    skipped_virtual = 0
    for occurrence in occurrences:
        if occurrence.kind.is_card and covering_invoice(
            occurrence.card_id,
            occurrence.occurrence_date,
            invoices,
        ):
            skipped_virtual += 1
            continue
        rows.append(MonthTransaction.from_occurrence(occurrence))
    if skipped_virtual and logger is not None:
        logger.info(
            f"Excluded {skipped_virtual} virtual card charges already "
            f"covered by closed invoices in {period}"
        )

    refs = references or ReferenceData.empty()
    for invoice in invoices:
        if invoice.status is not InvoiceStatus.CLOSED:
            continue
        if not period.contains(invoice.due_date):
            continue
        if invoice.total_amount <= 0:
            continue
        card = refs.cards.get(invoice.card_id)
        rows.append(
            MonthTransaction.from_invoice(
                invoice,
                card_name=card.name if card else None,
            )
        )

    if references is not None:
        rows = [row.decorated(references) for row in rows]
    return sorted(rows, key=lambda row: (row.entry_date, row.key), reverse=True)


__all__ = ["covering_invoice", "select_single_realizations", "merge_month"]
