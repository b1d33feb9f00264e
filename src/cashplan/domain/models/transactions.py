"""Merged month view rows."""

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from cashplan.domain.constants import EntryOrigin, EntryStatus, RuleKind
from cashplan.domain.errors import PartialComputationError
from cashplan.domain.models.invoices import Invoice
from cashplan.domain.models.ledger import LedgerEntry
from cashplan.domain.models.period import Period
from cashplan.domain.models.references import ReferenceData
from cashplan.domain.models.rules import VirtualOccurrence


@dataclass(frozen=True)
class MonthTransaction:
    """One row of the merged month view.

    Ledger entries, virtual occurrences and consolidated invoice liabilities
    all map to this shape. ``key`` is unique within a view.
    """

    key: str
    description: str
    amount: Decimal
    entry_date: date
    kind: RuleKind
    status: EntryStatus
    origin: EntryOrigin
    is_virtual: bool = False
    entry_id: int | None = None
    rule_id: int | None = None
    invoice_id: int | None = None
    category_id: int | None = None
    account_id: int | None = None
    card_id: int | None = None
    covered_by_invoice_id: int | None = None
    category_name: str | None = None
    account_name: str | None = None
    card_name: str | None = None
    note: str | None = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.kind.sign

    @property
    def traces_to_rule(self) -> bool:
        return self.rule_id is not None and self.origin in (
            EntryOrigin.RECURRING,
            EntryOrigin.RECURRING_ADJUSTMENT,
            EntryOrigin.RECURRING_SKIP,
            EntryOrigin.RECURRING_VIRTUAL,
        )

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "MonthTransaction":
        return cls(
            key=f"entry-{entry.id}",
            description=entry.description,
            amount=entry.amount,
            entry_date=entry.entry_date,
            kind=entry.kind,
            status=entry.status,
            origin=entry.origin,
            entry_id=entry.id,
            rule_id=entry.rule_id,
            invoice_id=entry.invoice_id,
            category_id=entry.category_id,
            account_id=entry.account_id,
            card_id=entry.card_id,
            note=entry.note,
        )

    @classmethod
    def from_occurrence(
        cls,
        occurrence: VirtualOccurrence,
    ) -> "MonthTransaction":
        return cls(
            key=str(occurrence.key),
            description=occurrence.description,
            amount=occurrence.amount,
            entry_date=occurrence.occurrence_date,
            kind=occurrence.kind,
            status=occurrence.status,
            origin=occurrence.origin,
            is_virtual=True,
            rule_id=occurrence.rule_id,
            category_id=occurrence.category_id,
            account_id=occurrence.account_id,
            card_id=occurrence.card_id,
            note=occurrence.note,
        )

    @classmethod
    def from_invoice(
        cls,
        invoice: Invoice,
        card_name: str | None = None,
    ) -> "MonthTransaction":
        label = card_name or f"card {invoice.card_id}"
        return cls(
            key=f"invoice-{invoice.id}",
            description=(
                f"Invoice {label} ({invoice.due_date:%d/%m})"
            ),
            amount=invoice.total_amount,
            entry_date=invoice.due_date,
            kind=RuleKind.EXPENSE,
            status=EntryStatus.PENDING,
            origin=EntryOrigin.INVOICE,
            invoice_id=invoice.id,
            card_id=invoice.card_id,
            card_name=card_name,
        )

    def decorated(self, references: ReferenceData) -> "MonthTransaction":
        """Return a copy with category, account and card names filled in."""
        category = references.categories.get(self.category_id)
        account = references.accounts.get(self.account_id)
        card = references.cards.get(self.card_id)
        return replace(
            self,
            category_name=category.name if category else self.category_name,
            account_name=account.name if account else self.account_name,
            card_name=card.name if card else self.card_name,
        )


@dataclass(frozen=True)
class MonthView:
    """Merged transactions for one month, newest first."""

    period: Period
    transactions: list[MonthTransaction]
    partial: bool = False
    failures: list[PartialComputationError] = field(default_factory=list)

    def __iter__(self) -> Iterator[MonthTransaction]:
        return iter(self.transactions)

    def __len__(self) -> int:
        return len(self.transactions)

    def for_rule(self, rule_id: int) -> list[MonthTransaction]:
        return [
            item
            for item in self.transactions
            if item.rule_id == rule_id and item.traces_to_rule
        ]


__all__ = ["MonthTransaction", "MonthView"]
