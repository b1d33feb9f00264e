"""Port for read-only reference data."""

from typing import Protocol

from cashplan.domain.models import Account, Card, Category, ReferenceData


class ReferenceRepositoryPort(Protocol):
    """Port exposing accounts, cards and categories."""

    def list_accounts(self, owner_id: str) -> list[Account]:
        """Return the owner's accounts."""

    def list_cards(self, owner_id: str) -> list[Card]:
        """Return the owner's cards."""

    def list_categories(self, owner_id: str) -> list[Category]:
        """Return the owner's and shared categories."""

    def load_reference_data(self, owner_id: str) -> ReferenceData:
        """Return every lookup table keyed by id."""


__all__ = ["ReferenceRepositoryPort"]
