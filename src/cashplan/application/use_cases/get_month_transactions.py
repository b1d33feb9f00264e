"""Use case to build the merged month view."""

from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.reference_repository import (
    ReferenceRepositoryPort,
)
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.constants import COVERING_INVOICE_STATUSES
from cashplan.domain.errors import DataAccessError, PartialComputationError
from cashplan.domain.models import (
    MonthTransaction,
    MonthView,
    Period,
    ReferenceData,
)
from cashplan.domain.services.materializer import materialize_occurrences
from cashplan.domain.services.reconciliation import merge_month
from cashplan.infrastructure.logging.logger import get_app_logger


def matches_account(
    row: MonthTransaction,
    account_id: int | None,
    references: ReferenceData | None,
) -> bool:
    """Whether a row affects ``account_id``.

    Card rows and invoice liabilities affect the card's payment account;
    cards without a payment account (or unknown cards) affect every account.
    """
    if account_id is None:
        return True
    if row.account_id is not None:
        return row.account_id == account_id
    if row.card_id is None:
        return False
    card = references.cards.get(row.card_id) if references else None
    if card is None or card.payment_account_id is None:
        return True
    return card.payment_account_id == account_id


class GetMonthTransactionsUseCase:
    """Merge ledger entries, virtual occurrences and invoice liabilities."""

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        invoice_repository: InvoiceRepositoryPort,
        reference_repository: ReferenceRepositoryPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            rule_repository: Port providing recurring rules.
            ledger_repository: Port providing ledger entries.
            invoice_repository: Port providing card invoices.
            reference_repository: Optional port for display names.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._rule_repository = rule_repository
        self._ledger_repository = ledger_repository
        self._invoice_repository = invoice_repository
        self._reference_repository = reference_repository
        self._logger = logger or get_app_logger()

    def execute(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> MonthView:
        """Return the month view, newest first.

        Fetches run one after the other: rules, ledger, invoices, then
        reference data. Any failed fetch marks the view partial. Virtual
        occurrences are only produced when both rules and ledger loaded,
        so a missing ledger never causes double counting.

        Args:
            owner_id: Owner whose data is merged.
            period: Target month.
            account_id: Optional account filter.

        Returns:
            MonthView: Merged rows plus the partial flag.
        """
        failures: list[PartialComputationError] = []

        rules = self._fetch(
            "rules",
            failures,
            lambda: self._rule_repository.list_rules(
                owner_id,
                active_only=True,
                period=period,
            ),
        )
        entries = self._fetch(
            "ledger",
            failures,
            lambda: self._ledger_repository.list_entries(
                owner_id,
                start_date=period.first_day,
                end_date=period.last_day,
            ),
        )
        if rules is None or entries is None:
            occurrences = []
        else:
            occurrences = materialize_occurrences(
                rules,
                period,
                entries,
                logger=self._logger,
            )
        invoices = self._fetch(
            "invoices",
            failures,
            lambda: self._invoice_repository.list_invoices(
                owner_id,
                statuses=COVERING_INVOICE_STATUSES,
            ),
        )
        invoices = [
            invoice
            for invoice in invoices or []
            if period.contains(invoice.due_date)
            or period.overlaps(invoice.opening_date, invoice.closing_date)
        ]
        references = None
        if self._reference_repository is not None:
            references = self._fetch(
                "references",
                failures,
                lambda: self._reference_repository.load_reference_data(
                    owner_id
                ),
            )

        rows = merge_month(
            period,
            entries or [],
            occurrences,
            invoices,
            references=references,
            logger=self._logger,
        )
        if account_id is not None:
            rows = [
                row
                for row in rows
                if matches_account(row, account_id, references)
            ]
        self._logger.info(
            f"Month view {period}: {len(rows)} rows "
            f"({len(occurrences)} virtual), partial={bool(failures)}"
        )
        return MonthView(
            period=period,
            transactions=rows,
            partial=bool(failures),
            failures=failures,
        )

    def _fetch(self, scope, failures, loader):
        try:
            return loader()
        except DataAccessError as exc:
            self._logger.error(f"Failed to fetch {scope}: {exc}")
            failures.append(
                PartialComputationError(
                    scope=scope,
                    reference=None,
                    message=str(exc),
                )
            )
            return None


__all__ = ["GetMonthTransactionsUseCase", "matches_account"]
