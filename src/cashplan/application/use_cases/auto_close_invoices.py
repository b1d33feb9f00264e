"""Use case to close card invoices whose closing date has passed."""

from datetime import date

from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.use_cases.invoice_totals import InvoiceTotals
from cashplan.domain.constants import InvoiceStatus
from cashplan.domain.errors import AutoCloseFailure, DataAccessError
from cashplan.domain.models import (
    AutoCloseResult,
    ChangeEvent,
    ChangeSubtype,
    ChangeType,
    EntityKind,
)
from cashplan.infrastructure.logging.logger import get_app_logger


class AutoCloseInvoicesUseCase:
    """Freeze totals of due open invoices and move them to closed."""

    def __init__(
        self,
        invoice_repository: InvoiceRepositoryPort,
        invoice_totals: InvoiceTotals,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
        include_virtual_card_charges: bool = True,
    ) -> None:
        """Initialize the use case.

        Args:
            invoice_repository: Port persisting invoices.
            invoice_totals: Helper computing dynamic totals.
            notifier: Optional change bus notified after closing.
            logger: Optional logger compatible with logging.Logger-like API.
            include_virtual_card_charges: Whether unconfirmed recurring card
                charges inside the window are frozen into the total.
        """
        self._invoice_repository = invoice_repository
        self._invoice_totals = invoice_totals
        self._notifier = notifier
        self._logger = logger or get_app_logger()
        self._include_virtual = include_virtual_card_charges

    def execute(self, owner_id: str, as_of: date) -> AutoCloseResult:
        """Close every open invoice with a closing date on or before as_of.

        Failures are recorded per invoice and never abort the batch.

        Args:
            owner_id: Owner whose invoices are closed.
            as_of: Reference date.

        Returns:
            AutoCloseResult: Closed invoices and per-invoice failures.
        """
        try:
            candidates = self._invoice_repository.list_invoices(
                owner_id,
                statuses=[InvoiceStatus.OPEN],
                closing_until=as_of,
            )
        except DataAccessError as exc:
            self._logger.error(f"Auto-close could not list invoices: {exc}")
            return AutoCloseResult(
                closed=[],
                failures=[AutoCloseFailure(invoice_id=None, message=str(exc))],
            )

        closed = []
        failures = []
        for invoice in candidates:
            try:
                total = self._invoice_totals.dynamic_total(
                    invoice,
                    include_virtual=self._include_virtual,
                )
                closed.append(
                    self._invoice_repository.close(
                        owner_id,
                        invoice.id,
                        total,
                    )
                )
            except DataAccessError as exc:
                self._logger.error(
                    f"Failed to auto-close invoice {invoice.id}: {exc}"
                )
                failures.append(
                    AutoCloseFailure(invoice_id=invoice.id, message=str(exc))
                )
                continue
            self._logger.info(
                f"Closed invoice {invoice.id} of card {invoice.card_id} "
                f"({invoice.period}) with total {total}"
            )

        if closed and self._notifier is not None:
            self._notifier.publish(
                ChangeEvent(
                    change_type=ChangeType.UPDATE,
                    subtype=ChangeSubtype.CARD_EXPENSE,
                    entity=EntityKind.INVOICE,
                    affected_ids=tuple(invoice.id for invoice in closed),
                    owner_id=owner_id,
                )
            )
        return AutoCloseResult(closed=closed, failures=failures)


__all__ = ["AutoCloseInvoicesUseCase"]
