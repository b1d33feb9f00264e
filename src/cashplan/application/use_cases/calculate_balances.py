"""Use case computing current and projected balances and indicators."""

from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal

from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.period_totals import PeriodTotalsFunctionPort
from cashplan.application.ports.reference_repository import (
    ReferenceRepositoryPort,
)
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.application.use_cases.get_month_transactions import (
    GetMonthTransactionsUseCase,
)
from cashplan.application.use_cases.invoice_totals import InvoiceTotals
from cashplan.domain.constants import EntryStatus, InvoiceStatus
from cashplan.domain.errors import DataAccessError, PartialComputationError
from cashplan.domain.models import (
    Account,
    BalanceIndicators,
    BalanceSnapshot,
    Card,
    Invoice,
    LedgerEntry,
    Period,
    VirtualOccurrence,
)
from cashplan.domain.services.balances import (
    build_indicators,
    signed,
    sum_signed,
    totals_from_rows,
    totals_from_transactions,
)
from cashplan.domain.services.materializer import materialize_range
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.utils.decimal_utils import ZERO, to_money


class BalanceCalculator:
    """Derive balances from opening balances, the ledger and projections.

    Read paths degrade instead of failing: a fetch error contributes zero,
    marks the result partial and is recorded as a PartialComputationError.
    """

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        rule_repository: RecurringRuleRepositoryPort,
        invoice_repository: InvoiceRepositoryPort,
        reference_repository: ReferenceRepositoryPort,
        month_transactions: GetMonthTransactionsUseCase,
        invoice_totals: InvoiceTotals,
        period_totals: PeriodTotalsFunctionPort | None = None,
        logger=None,
        today_provider: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the calculator.

        Args:
            ledger_repository: Port providing ledger entries.
            rule_repository: Port providing recurring rules.
            invoice_repository: Port providing card invoices.
            reference_repository: Port providing accounts and cards.
            month_transactions: Use case building the merged month view.
            invoice_totals: Helper computing open invoice totals.
            period_totals: Optional server-side aggregate function.
            logger: Optional logger compatible with logging.Logger-like API.
            today_provider: Clock defining the current month.
        """
        self._ledger_repository = ledger_repository
        self._rule_repository = rule_repository
        self._invoice_repository = invoice_repository
        self._reference_repository = reference_repository
        self._month_transactions = month_transactions
        self._invoice_totals = invoice_totals
        self._period_totals = period_totals
        self._logger = logger or get_app_logger()
        self._today_provider = today_provider

    def current_balance(
        self,
        owner_id: str,
        accounts: Sequence[Account] | None = None,
        as_of: date | None = None,
    ) -> BalanceSnapshot:
        """Return opening balances plus confirmed entries up to ``as_of``.

        Args:
            owner_id: Owner of the accounts.
            accounts: Accounts to include; defaults to every owner account.
            as_of: Inclusive cut-off date; defaults to today.

        Returns:
            BalanceSnapshot: Total and per-account balances.
        """
        as_of = as_of or self._today_provider()
        failures: list[PartialComputationError] = []
        accounts = self._resolve_accounts(owner_id, accounts, failures)
        per_account: dict[int, Decimal] = {}
        for account in accounts:
            try:
                entries = self._ledger_repository.list_entries(
                    owner_id,
                    account_id=account.id,
                    end_date=as_of,
                    statuses=[EntryStatus.CONFIRMED],
                )
            except DataAccessError as exc:
                self._record_account_failure(account, exc, failures)
                per_account[account.id] = ZERO
                continue
            per_account[account.id] = to_money(
                account.opening_balance + sum_signed(entries)
            )
        return self._snapshot(as_of, per_account, ZERO, failures)

    def projected_balance(
        self,
        owner_id: str,
        accounts: Sequence[Account] | None = None,
        horizon: date | None = None,
    ) -> BalanceSnapshot:
        """Return the expected balance at ``horizon``.

        Adds confirmed and pending entries up to the horizon, virtual
        occurrences from the current month through the horizon, and
        subtracts open and closed invoices due by the horizon. Card charges
        (entries and occurrences) reach the card's payment account directly
        unless their billing window belongs to one of those invoices or to a
        paid invoice, whose payment entry is already in the ledger.

        Args:
            owner_id: Owner of the accounts.
            accounts: Accounts to include; defaults to every owner account.
            horizon: Inclusive projection date; defaults to the end of the
                current month.

        Returns:
            BalanceSnapshot: Total and per-account projections. Invoices and
            charges of cards without a payment account only reduce the total.
        """
        today = self._today_provider()
        horizon = horizon or Period.from_date(today).last_day
        failures: list[PartialComputationError] = []
        accounts = self._resolve_accounts(owner_id, accounts, failures)

        per_account: dict[int, Decimal] = {}
        failed: set[int] = set()
        for account in accounts:
            try:
                entries = self._ledger_repository.list_entries(
                    owner_id,
                    account_id=account.id,
                    end_date=horizon,
                )
            except DataAccessError as exc:
                self._record_account_failure(account, exc, failures)
                per_account[account.id] = ZERO
                failed.add(account.id)
                continue
            per_account[account.id] = account.opening_balance + sum_signed(
                entry for entry in entries if not entry.kind.is_card
            )

        unassigned = ZERO

        def charge(account_id: int | None, amount: Decimal) -> None:
            nonlocal unassigned
            if account_id is None:
                unassigned += amount
            elif account_id in per_account and account_id not in failed:
                per_account[account_id] += amount

        cards, liabilities, paid = self._invoice_liabilities(
            owner_id,
            horizon,
            failures,
        )
        billed = [invoice for invoice, _ in liabilities] + paid

        def payment_account(card_id: int | None) -> int | None:
            card = cards.get(card_id)
            return card.payment_account_id if card else None

        for occurrence in self._future_occurrences(
            owner_id,
            today,
            horizon,
            failures,
        ):
            amount = signed(occurrence.kind, occurrence.amount)
            if not occurrence.kind.is_card:
                charge(occurrence.account_id, amount)
            elif not _billed(
                occurrence.card_id,
                occurrence.occurrence_date,
                billed,
            ):
                charge(payment_account(occurrence.card_id), amount)

        for entry in self._card_entries(owner_id, horizon, failures):
            if not _billed(entry.card_id, entry.entry_date, billed):
                charge(payment_account(entry.card_id), entry.signed_amount)

        for invoice, amount in liabilities:
            charge(payment_account(invoice.card_id), -amount)

        per_account = {
            account_id: to_money(amount)
            for account_id, amount in per_account.items()
        }
        return self._snapshot(horizon, per_account, unassigned, failures)

    def consolidated_indicators(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> BalanceIndicators:
        """Return income, expense, net flow and savings rate for a month.

        Args:
            owner_id: Owner whose data is aggregated.
            period: Target month.
            account_id: Optional account scope.

        Returns:
            BalanceIndicators: Consolidated indicators, partial on failure.
        """
        view = self._month_transactions.execute(owner_id, period, account_id)
        failures = list(view.failures)

        ledger_totals = None
        if self._period_totals is not None:
            try:
                ledger_totals = totals_from_rows(
                    self._period_totals.fetch_period_totals(
                        owner_id,
                        period,
                        account_id,
                    )
                )
            except DataAccessError as exc:
                self._logger.warning(
                    f"Period totals function failed for {period}, "
                    f"falling back to local aggregation: {exc}"
                )
        if ledger_totals is None:
            ledger_totals = totals_from_transactions(view.transactions)

        accounts = None
        if account_id is not None:
            accounts = [
                account
                for account in self._resolve_accounts(owner_id, None, failures)
                if account.id == account_id
            ]
        opening = self.current_balance(
            owner_id,
            accounts,
            as_of=period.day_before(),
        )
        failures.extend(opening.failures)

        indicators = build_indicators(
            period,
            view.transactions,
            ledger_totals,
            opening.total,
            account_id=account_id,
            failures=failures,
        )
        self._logger.info(
            f"Indicators {period} (account={account_id}): "
            f"income={indicators.total_income}, "
            f"expense={indicators.total_expense}, "
            f"savings_rate={indicators.savings_rate}, "
            f"partial={indicators.partial}"
        )
        return indicators

    def _resolve_accounts(
        self,
        owner_id: str,
        accounts: Sequence[Account] | None,
        failures: list[PartialComputationError],
    ) -> list[Account]:
        if accounts is not None:
            return list(accounts)
        try:
            return self._reference_repository.list_accounts(owner_id)
        except DataAccessError as exc:
            self._logger.error(f"Failed to fetch accounts: {exc}")
            failures.append(
                PartialComputationError(
                    scope="accounts",
                    reference=None,
                    message=str(exc),
                )
            )
            return []

    def _record_account_failure(
        self,
        account: Account,
        exc: DataAccessError,
        failures: list[PartialComputationError],
    ) -> None:
        self._logger.error(
            f"Failed to fetch ledger for account {account.id}: {exc}"
        )
        failures.append(
            PartialComputationError(
                scope="account",
                reference=account.id,
                message=str(exc),
            )
        )

    def _future_occurrences(
        self,
        owner_id: str,
        today: date,
        horizon: date,
        failures: list[PartialComputationError],
    ) -> list[VirtualOccurrence]:
        start = Period.from_date(today)
        end = Period.from_date(horizon)
        if end < start:
            return []
        try:
            rules = self._rule_repository.list_rules(owner_id, active_only=True)
            entries = self._ledger_repository.list_entries(
                owner_id,
                start_date=start.first_day,
                end_date=end.last_day,
            )
        except DataAccessError as exc:
            self._logger.error(f"Failed to project occurrences: {exc}")
            failures.append(
                PartialComputationError(
                    scope="occurrences",
                    reference=None,
                    message=str(exc),
                )
            )
            return []
        return [
            occurrence
            for occurrence in materialize_range(
                rules,
                Period.range(start, end),
                entries,
            )
            if occurrence.occurrence_date <= horizon
        ]

    def _card_entries(
        self,
        owner_id: str,
        horizon: date,
        failures: list[PartialComputationError],
    ) -> list[LedgerEntry]:
        try:
            entries = self._ledger_repository.list_entries(
                owner_id,
                end_date=horizon,
            )
        except DataAccessError as exc:
            self._logger.error(f"Failed to fetch card charges: {exc}")
            failures.append(
                PartialComputationError(
                    scope="card_entries",
                    reference=None,
                    message=str(exc),
                )
            )
            return []
        return [entry for entry in entries if entry.kind.is_card]

    def _invoice_liabilities(
        self,
        owner_id: str,
        horizon: date,
        failures: list[PartialComputationError],
    ) -> tuple[
        dict[int, Card],
        list[tuple[Invoice, Decimal]],
        list[Invoice],
    ]:
        """Return cards, unpaid invoices due by ``horizon`` and paid ones."""
        try:
            invoices = self._invoice_repository.list_invoices(owner_id)
            cards = {
                card.id: card
                for card in self._reference_repository.list_cards(owner_id)
            }
        except DataAccessError as exc:
            self._logger.error(f"Failed to fetch invoice liabilities: {exc}")
            failures.append(
                PartialComputationError(
                    scope="invoices",
                    reference=None,
                    message=str(exc),
                )
            )
            return {}, [], []

        liabilities = []
        paid = []
        for invoice in invoices:
            if invoice.status is InvoiceStatus.PAID:
                paid.append(invoice)
                continue
            if invoice.due_date > horizon:
                continue
            if invoice.status is InvoiceStatus.CLOSED:
                amount = invoice.total_amount
            else:
                try:
                    amount = self._invoice_totals.dynamic_total(invoice)
                except DataAccessError as exc:
                    self._logger.error(
                        f"Failed to compute total of invoice {invoice.id}: "
                        f"{exc}"
                    )
                    failures.append(
                        PartialComputationError(
                            scope="invoice",
                            reference=invoice.id,
                            message=str(exc),
                        )
                    )
                    continue
            liabilities.append((invoice, amount))
        return cards, liabilities, paid

    def _snapshot(
        self,
        as_of: date,
        per_account: dict[int, Decimal],
        adjustment: Decimal,
        failures: list[PartialComputationError],
    ) -> BalanceSnapshot:
        total = sum(per_account.values(), ZERO) + adjustment
        return BalanceSnapshot(
            as_of=as_of,
            total=to_money(total),
            per_account=per_account,
            partial=bool(failures),
            failures=failures,
        )


def _billed(
    card_id: int | None,
    charge_date: date,
    invoices: Sequence[Invoice],
) -> bool:
    """Whether a card charge falls in the window of one of ``invoices``."""
    return any(
        invoice.card_id == card_id and invoice.window_contains(charge_date)
        for invoice in invoices
    )


__all__ = ["BalanceCalculator"]
