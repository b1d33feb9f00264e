"""Read-only reference data used to decorate entries."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Account:
    """Cash account with its opening balance."""

    id: int
    owner_id: str
    name: str
    opening_balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class Card:
    """Credit card with billing days."""

    id: int
    owner_id: str
    name: str
    closing_day: int
    due_day: int
    payment_account_id: int | None = None


@dataclass(frozen=True)
class Category:
    id: int
    owner_id: str | None
    name: str
    color: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class ReferenceData:
    """Lookup tables keyed by id."""

    accounts: dict[int, Account]
    cards: dict[int, Card]
    categories: dict[int, Category]

    @classmethod
    def empty(cls) -> "ReferenceData":
        return cls(accounts={}, cards={}, categories={})


__all__ = ["Account", "Card", "Category", "ReferenceData"]
