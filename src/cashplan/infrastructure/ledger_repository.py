"""SQLAlchemy repository for ledger entries."""

from collections.abc import Iterable
from datetime import date

from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError

from cashplan.application.ports.database import DatabaseEnginePort
from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.domain.constants import EntryOrigin, EntryStatus, RuleKind
from cashplan.domain.errors import (
    DataAccessError,
    DuplicateRealizationError,
    NotFoundError,
)
from cashplan.domain.models import Installment, LedgerEntry, Period
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import ledger_entries
from cashplan.infrastructure.sqlalchemy_support import data_access
from cashplan.utils.decimal_utils import to_money


def _row_to_entry(row) -> LedgerEntry:
    mapping = row._mapping
    installment = None
    if mapping["installment_index"] is not None:
        installment = Installment(
            index=mapping["installment_index"],
            total=mapping["installment_total"],
            group_id=mapping["installment_group"],
        )
    return LedgerEntry(
        id=mapping["id"],
        owner_id=mapping["owner_id"],
        description=mapping["description"],
        amount=to_money(mapping["amount"]),
        entry_date=mapping["entry_date"],
        kind=RuleKind(mapping["kind"]),
        status=EntryStatus(mapping["status"]),
        origin=EntryOrigin(mapping["origin"]),
        category_id=mapping["category_id"],
        account_id=mapping["account_id"],
        card_id=mapping["card_id"],
        rule_id=mapping["rule_id"],
        installment=installment,
        invoice_id=mapping["invoice_id"],
        note=mapping["note"],
    )


def _entry_values(entry: LedgerEntry) -> dict:
    realized = entry.realized_period
    installment = entry.installment
    return {
        "owner_id": entry.owner_id,
        "description": entry.description,
        "amount": to_money(entry.amount),
        "entry_date": entry.entry_date,
        "kind": entry.kind.value,
        "status": entry.status.value,
        "origin": entry.origin.value,
        "category_id": entry.category_id,
        "account_id": entry.account_id,
        "card_id": entry.card_id,
        "rule_id": entry.rule_id,
        "realized_period": realized.key if realized else None,
        "installment_index": installment.index if installment else None,
        "installment_total": installment.total if installment else None,
        "installment_group": installment.group_id if installment else None,
        "invoice_id": entry.invoice_id,
        "note": entry.note,
    }


class SqlAlchemyLedgerRepository(LedgerRepositoryPort):
    """Ledger entries stored in the ``ledger_entries`` table.

    Realizing entries carry a ``realized_period`` column covered by a
    unique index with ``rule_id``; a collision surfaces as
    DuplicateRealizationError.
    """

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the database engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

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
        """Return entries matching the filters, oldest first."""
        columns = ledger_entries.c
        conditions = [columns.owner_id == owner_id]
        if start_date is not None:
            conditions.append(columns.entry_date >= start_date)
        if end_date is not None:
            conditions.append(columns.entry_date <= end_date)
        if account_id is not None:
            conditions.append(columns.account_id == account_id)
        if card_id is not None:
            conditions.append(columns.card_id == card_id)
        if statuses is not None:
            conditions.append(
                columns.status.in_([status.value for status in statuses])
            )
        if rule_id is not None:
            conditions.append(columns.rule_id == rule_id)
        stmt = (
            select(ledger_entries)
            .where(and_(*conditions))
            .order_by(columns.entry_date, columns.id)
        )
        with data_access("listing ledger entries", self._logger):
            with self._db_port.get_engine().connect() as conn:
                rows = conn.execute(stmt).all()
        return [_row_to_entry(row) for row in rows]

    def find_realization(
        self,
        owner_id: str,
        rule_id: int,
        period: Period,
    ) -> LedgerEntry | None:
        columns = ledger_entries.c
        stmt = (
            select(ledger_entries)
            .where(
                columns.owner_id == owner_id,
                columns.rule_id == rule_id,
                columns.realized_period == period.key,
            )
            .order_by(columns.id)
        )
        with data_access(
            f"reading realization of rule {rule_id} for {period}",
            self._logger,
        ):
            with self._db_port.get_engine().connect() as conn:
                row = conn.execute(stmt).first()
        return _row_to_entry(row) if row is not None else None

    def create(self, entry: LedgerEntry) -> LedgerEntry:
        values = _entry_values(entry)
        with data_access("creating ledger entry", self._logger):
            try:
                with self._db_port.get_engine().begin() as conn:
                    result = conn.execute(insert(ledger_entries).values(**values))
                    entry_id = result.inserted_primary_key[0]
            except IntegrityError as exc:
                if entry.is_realization:
                    self._logger.warning(
                        f"Realization of rule {entry.rule_id} for "
                        f"{values['realized_period']} already stored"
                    )
                    raise DuplicateRealizationError(
                        entry.rule_id,
                        values["realized_period"],
                    ) from exc
                raise DataAccessError(
                    f"Failed creating ledger entry: {exc}"
                ) from exc
        return self._get(entry.owner_id, entry_id)

    def replace_realization(self, entry: LedgerEntry) -> LedgerEntry:
        if entry.id is None:
            raise NotFoundError("Ledger entry", None)
        values = _entry_values(entry)
        stmt = (
            update(ledger_entries)
            .where(
                ledger_entries.c.id == entry.id,
                ledger_entries.c.owner_id == entry.owner_id,
            )
            .values(**values)
        )
        self._execute_update(entry.id, stmt)
        return self._get(entry.owner_id, entry.id)

    def update_status(
        self,
        owner_id: str,
        entry_id: int,
        status: EntryStatus,
    ) -> LedgerEntry:
        stmt = (
            update(ledger_entries)
            .where(
                ledger_entries.c.id == entry_id,
                ledger_entries.c.owner_id == owner_id,
            )
            .values(status=status.value)
        )
        self._execute_update(entry_id, stmt)
        return self._get(owner_id, entry_id)

    def _execute_update(self, entry_id: int, stmt) -> None:
        with data_access(f"updating ledger entry {entry_id}", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Ledger entry", entry_id)

    def _get(self, owner_id: str, entry_id: int) -> LedgerEntry:
        stmt = select(ledger_entries).where(
            ledger_entries.c.id == entry_id,
            ledger_entries.c.owner_id == owner_id,
        )
        with data_access(f"reading ledger entry {entry_id}", self._logger):
            with self._db_port.get_engine().connect() as conn:
                row = conn.execute(stmt).first()
        if row is None:
            raise NotFoundError("Ledger entry", entry_id)
        return _row_to_entry(row)


__all__ = ["SqlAlchemyLedgerRepository"]
