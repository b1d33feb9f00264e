"""Persisted ledger entry models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from cashplan.domain.constants import (
    REALIZING_ORIGINS,
    EntryOrigin,
    EntryStatus,
    RuleKind,
)
from cashplan.domain.models.period import Period


@dataclass(frozen=True)
class Installment:
    """Installment metadata for split purchases."""

    index: int
    total: int
    group_id: str | None = None


@dataclass(frozen=True)
class LedgerEntry:
    """A real transaction, pending or confirmed."""

    id: int | None
    owner_id: str
    description: str
    amount: Decimal
    entry_date: date
    kind: RuleKind
    status: EntryStatus
    origin: EntryOrigin = EntryOrigin.MANUAL
    category_id: int | None = None
    account_id: int | None = None
    card_id: int | None = None
    rule_id: int | None = None
    installment: Installment | None = None
    invoice_id: int | None = None
    note: str | None = None

    @property
    def is_realization(self) -> bool:
        """Whether the entry realizes a recurring rule for its month."""
        return self.rule_id is not None and self.origin in REALIZING_ORIGINS

    @property
    def realized_period(self) -> Period | None:
        if not self.is_realization:
            return None
        return Period.from_date(self.entry_date)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.kind.sign


__all__ = ["Installment", "LedgerEntry"]
