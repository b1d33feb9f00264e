"""Use cases for opening and paying card invoices."""

from collections.abc import Callable
from datetime import date

from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.ports.reference_repository import (
    ReferenceRepositoryPort,
)
from cashplan.domain.constants import (
    EntryOrigin,
    EntryStatus,
    InvoiceStatus,
    RuleKind,
)
from cashplan.domain.errors import NotFoundError, ValidationError
from cashplan.domain.models import (
    Card,
    ChangeEvent,
    ChangeSubtype,
    ChangeType,
    EntityKind,
    Invoice,
    LedgerEntry,
    Period,
)
from cashplan.domain.services.invoicing import new_invoice
from cashplan.infrastructure.logging.logger import get_app_logger


def _find_card(
    reference_repository: ReferenceRepositoryPort,
    owner_id: str,
    card_id: int,
) -> Card:
    for card in reference_repository.list_cards(owner_id):
        if card.id == card_id:
            return card
    raise NotFoundError("Card", card_id)


class OpenInvoiceUseCase:
    """Return the invoice of a card for a month, creating it when missing."""

    def __init__(
        self,
        invoice_repository: InvoiceRepositoryPort,
        reference_repository: ReferenceRepositoryPort,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            invoice_repository: Port persisting invoices.
            reference_repository: Port providing card metadata.
            notifier: Optional change bus notified after writes.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._invoice_repository = invoice_repository
        self._reference_repository = reference_repository
        self._notifier = notifier
        self._logger = logger or get_app_logger()

    def execute(self, owner_id: str, card_id: int, period: Period) -> Invoice:
        """Open (or fetch) the invoice referenced by ``period``.

        Args:
            owner_id: Card owner.
            card_id: Card billed.
            period: Invoice reference month.

        Returns:
            Invoice: Existing or newly opened invoice.

        Raises:
            NotFoundError: If the card does not exist for this owner.
        """
        card = _find_card(self._reference_repository, owner_id, card_id)
        for invoice in self._invoice_repository.list_invoices(
            owner_id,
            card_id=card_id,
        ):
            if invoice.period == period:
                return invoice
        created = self._invoice_repository.create(new_invoice(card, period))
        self._logger.info(
            f"Opened invoice {created.id} for card {card.name} ({period}): "
            f"{created.opening_date} to {created.closing_date}, "
            f"due {created.due_date}"
        )
        if self._notifier is not None:
            self._notifier.publish(
                ChangeEvent(
                    change_type=ChangeType.CREATE,
                    subtype=ChangeSubtype.CARD_EXPENSE,
                    entity=EntityKind.INVOICE,
                    affected_ids=(created.id,),
                    owner_id=owner_id,
                )
            )
        return created


class PayInvoiceUseCase:
    """Pay a closed invoice from an account."""

    def __init__(
        self,
        invoice_repository: InvoiceRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        reference_repository: ReferenceRepositoryPort,
        notifier: ChangeNotifierPort | None = None,
        logger=None,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the use case.

        Args:
            invoice_repository: Port reading and updating invoices.
            ledger_repository: Port recording the payment entry.
            reference_repository: Port providing card metadata.
            notifier: Optional change bus notified after writes.
            logger: Optional logger compatible with logging.Logger-like API.
            today_provider: Clock used when no payment date is given.
        """
        self._invoice_repository = invoice_repository
        self._ledger_repository = ledger_repository
        self._reference_repository = reference_repository
        self._notifier = notifier
        self._logger = logger or get_app_logger()
        self._today_provider = today_provider

    def execute(
        self,
        owner_id: str,
        invoice_id: int,
        account_id: int | None = None,
        paid_on: date | None = None,
    ) -> Invoice:
        """Record the payment entry and mark the invoice as paid.

        Args:
            owner_id: Invoice owner.
            invoice_id: Invoice to pay.
            account_id: Paying account; defaults to the card's payment
                account.
            paid_on: Payment date; defaults to today.

        Returns:
            Invoice: The paid invoice.

        Raises:
            NotFoundError: If the invoice or its card is missing.
            ValidationError: If the invoice is not closed or no paying
                account can be determined.
        """
        invoice = self._invoice_repository.get(owner_id, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        if invoice.status is not InvoiceStatus.CLOSED:
            raise ValidationError(
                f"Only closed invoices can be paid (invoice {invoice_id} "
                f"is {invoice.status.value})"
            )
        card = _find_card(
            self._reference_repository,
            owner_id,
            invoice.card_id,
        )
        account_id = account_id or card.payment_account_id
        if account_id is None:
            raise ValidationError(
                f"No paying account for invoice {invoice_id}"
            )

        payment = self._ledger_repository.create(
            LedgerEntry(
                id=None,
                owner_id=owner_id,
                description=f"Invoice payment {card.name} ({invoice.period})",
                amount=invoice.total_amount,
                entry_date=paid_on or self._today_provider(),
                kind=RuleKind.EXPENSE,
                status=EntryStatus.CONFIRMED,
                origin=EntryOrigin.INVOICE,
                account_id=account_id,
                invoice_id=invoice.id,
            )
        )
        paid = self._invoice_repository.mark_paid(
            owner_id,
            invoice.id,
            payment.id,
        )
        self._logger.info(
            f"Paid invoice {invoice.id} ({invoice.total_amount}) from "
            f"account {account_id} with entry {payment.id}"
        )
        if self._notifier is not None:
            self._notifier.publish(
                ChangeEvent(
                    change_type=ChangeType.UPDATE,
                    subtype=ChangeSubtype.EXPENSE,
                    entity=EntityKind.INVOICE,
                    affected_ids=(invoice.id, payment.id),
                    owner_id=owner_id,
                    account_ids=(account_id,),
                )
            )
        return paid


__all__ = ["OpenInvoiceUseCase", "PayInvoiceUseCase"]
