"""Dynamic invoice totals."""

from decimal import Decimal

from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.models import Invoice
from cashplan.domain.services.invoicing import compute_invoice_total
from cashplan.domain.services.materializer import materialize_range
from cashplan.infrastructure.logging.logger import get_app_logger


class InvoiceTotals:
    """Compute the running total of an invoice from its billing window."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        rule_repository: RecurringRuleRepositoryPort,
        logger=None,
    ) -> None:
        """Initialize the helper.

        Args:
            ledger_repository: Port providing card entries.
            rule_repository: Port providing recurring card rules.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._ledger_repository = ledger_repository
        self._rule_repository = rule_repository
        self._logger = logger or get_app_logger()

    def dynamic_total(
        self,
        invoice: Invoice,
        include_virtual: bool = True,
    ) -> Decimal:
        """Return card entries plus pending recurring card charges.

        Args:
            invoice: Invoice whose window is summed.
            include_virtual: Whether still-virtual recurring card charges
                inside the window are added.

        Returns:
            Decimal: Total in cents.

        Raises:
            DataAccessError: If the ledger or rules cannot be fetched.
        """
        periods = invoice.window_periods
        entries = self._ledger_repository.list_entries(
            invoice.owner_id,
            card_id=invoice.card_id,
            start_date=periods[0].first_day,
            end_date=periods[-1].last_day,
        )
        occurrences = []
        if include_virtual:
            rules = self._rule_repository.list_rules(
                invoice.owner_id,
                active_only=True,
                card_id=invoice.card_id,
            )
            occurrences = materialize_range(rules, periods, entries)
        total = compute_invoice_total(invoice, entries, occurrences)
        self._logger.debug(
            f"Invoice {invoice.id} dynamic total {total} "
            f"({len(entries)} entries, {len(occurrences)} virtual)"
        )
        return total


__all__ = ["InvoiceTotals"]
