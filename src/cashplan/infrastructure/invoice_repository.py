"""SQLAlchemy repository for card invoices."""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import and_, insert, select, update

from cashplan.application.ports.database import DatabaseEnginePort
from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.domain.constants import InvoiceStatus
from cashplan.domain.errors import NotFoundError, ValidationError
from cashplan.domain.models import Invoice, Period
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import invoices
from cashplan.infrastructure.sqlalchemy_support import data_access
from cashplan.utils.decimal_utils import to_money


def _row_to_invoice(row) -> Invoice:
    mapping = row._mapping
    return Invoice(
        id=mapping["id"],
        owner_id=mapping["owner_id"],
        card_id=mapping["card_id"],
        period=Period.parse(mapping["reference_period"]),
        opening_date=mapping["opening_date"],
        closing_date=mapping["closing_date"],
        due_date=mapping["due_date"],
        status=InvoiceStatus(mapping["status"]),
        total_amount=to_money(mapping["total_amount"]),
        paid_entry_id=mapping["paid_entry_id"],
    )


class SqlAlchemyInvoiceRepository(InvoiceRepositoryPort):
    """Invoices stored in the ``invoices`` table."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        self._db_port = db_port
        self._logger = logger or get_app_logger()

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
        """Return invoices ordered by due date then id.

        Args:
            owner_id: Owner filter.
            statuses: Keep only these statuses.
            card_id: Keep only invoices of this card.
            closing_until: Keep invoices closing on or before this date.
            due_until: Keep invoices due on or before this date.
            window_overlaps: Keep invoices whose window meets this month.

        Returns:
            list[Invoice]: Matching invoices.
        """
        columns = invoices.c
        conditions = [columns.owner_id == owner_id]
        if statuses is not None:
            conditions.append(
                columns.status.in_([status.value for status in statuses])
            )
        if card_id is not None:
            conditions.append(columns.card_id == card_id)
        if closing_until is not None:
            conditions.append(columns.closing_date <= closing_until)
        if due_until is not None:
            conditions.append(columns.due_date <= due_until)
        if window_overlaps is not None:
            conditions.append(columns.opening_date <= window_overlaps.last_day)
            conditions.append(columns.closing_date >= window_overlaps.first_day)
        stmt = (
            select(invoices)
            .where(and_(*conditions))
            .order_by(columns.due_date, columns.id)
        )
        with data_access("listing invoices", self._logger):
            with self._db_port.get_engine().connect() as conn:
                rows = conn.execute(stmt).all()
        return [_row_to_invoice(row) for row in rows]

    def get(self, owner_id: str, invoice_id: int) -> Invoice | None:
        stmt = select(invoices).where(
            invoices.c.id == invoice_id,
            invoices.c.owner_id == owner_id,
        )
        with data_access(f"reading invoice {invoice_id}", self._logger):
            with self._db_port.get_engine().connect() as conn:
                row = conn.execute(stmt).first()
        return _row_to_invoice(row) if row is not None else None

    def create(self, invoice: Invoice) -> Invoice:
        values = {
            "owner_id": invoice.owner_id,
            "card_id": invoice.card_id,
            "reference_period": invoice.period.key,
            "opening_date": invoice.opening_date,
            "closing_date": invoice.closing_date,
            "due_date": invoice.due_date,
            "status": invoice.status.value,
            "total_amount": to_money(invoice.total_amount),
            "paid_entry_id": invoice.paid_entry_id,
        }
        with data_access("creating invoice", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(insert(invoices).values(**values))
                invoice_id = result.inserted_primary_key[0]
        return self._require(invoice.owner_id, invoice_id)

    def close(
        self,
        owner_id: str,
        invoice_id: int,
        total_amount: Decimal,
    ) -> Invoice:
        return self._transition(
            owner_id,
            invoice_id,
            InvoiceStatus.OPEN,
            {
                "status": InvoiceStatus.CLOSED.value,
                "total_amount": to_money(total_amount),
            },
        )

    def mark_paid(
        self,
        owner_id: str,
        invoice_id: int,
        paid_entry_id: int,
    ) -> Invoice:
        return self._transition(
            owner_id,
            invoice_id,
            InvoiceStatus.CLOSED,
            {
                "status": InvoiceStatus.PAID.value,
                "paid_entry_id": paid_entry_id,
            },
        )

    def _transition(
        self,
        owner_id: str,
        invoice_id: int,
        expected: InvoiceStatus,
        values: dict,
    ) -> Invoice:
        stmt = (
            update(invoices)
            .where(
                invoices.c.id == invoice_id,
                invoices.c.owner_id == owner_id,
                invoices.c.status == expected.value,
            )
            .values(**values)
        )
        with data_access(f"updating invoice {invoice_id}", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(stmt)
        if result.rowcount == 0:
            current = self._require(owner_id, invoice_id)
            raise ValidationError(
                f"Invoice {invoice_id} is {current.status.value}, "
                f"expected {expected.value}"
            )
        return self._require(owner_id, invoice_id)

    def _require(self, owner_id: str, invoice_id: int) -> Invoice:
        invoice = self.get(owner_id, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice


__all__ = ["SqlAlchemyInvoiceRepository"]
