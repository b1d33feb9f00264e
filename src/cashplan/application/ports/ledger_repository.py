"""Port for ledger entry persistence."""

from collections.abc import Iterable
from datetime import date
from typing import Protocol

from cashplan.domain.constants import EntryStatus
from cashplan.domain.models import LedgerEntry, Period


class LedgerRepositoryPort(Protocol):
    """Port exposing ledger reads and the writes used by the workflows."""

    def list_entries(
        self,
        owner_id: str,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        account_id: int | None = None,
        card_id: int | None = None,
        statuses: Iterable[EntryStatus] | None = None,
        rule_id: int | None = None,
    ) -> list[LedgerEntry]:
        """Return entries matching every given filter (bounds included)."""

    def find_realization(
        self,
        owner_id: str,
        rule_id: int,
        period: Period,
    ) -> LedgerEntry | None:
        """Return the realizing entry of a rule for a month, if any."""

    def create(self, entry: LedgerEntry) -> LedgerEntry:
        """Insert an entry and return it with its id.

        Raises:
            DuplicateRealizationError: If the entry realizes a rule for a
                month that already has a realizing entry.
        """

    def replace_realization(self, entry: LedgerEntry) -> LedgerEntry:
        """Overwrite the stored entry with the same id."""

    def update_status(
        self,
        owner_id: str,
        entry_id: int,
        status: EntryStatus,
    ) -> LedgerEntry:
        """Change an entry status and return the updated entry."""


__all__ = ["LedgerRepositoryPort"]
