"""Facade exposing the cash-flow engine to adapters."""

from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal

from cashplan.application.ports.invoice_repository import (
    InvoiceRepositoryPort,
)
from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.notifier import ChangeNotifierPort
from cashplan.application.ports.period_totals import PeriodTotalsFunctionPort
from cashplan.application.ports.reference_repository import (
    ReferenceRepositoryPort,
)
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.application.use_cases import (
    ApplyAdjustmentUseCase,
    AutoCloseInvoicesUseCase,
    BalanceCalculator,
    ConfirmOccurrenceUseCase,
    GetMonthTransactionsUseCase,
    InvoiceTotals,
    ManageRecurringRulesUseCase,
    MaterializeOccurrencesUseCase,
    OpenInvoiceUseCase,
    PayInvoiceUseCase,
    ProjectMonthsUseCase,
)
from cashplan.domain.constants import AdjustmentMode, InvoiceStatus
from cashplan.domain.errors import NotFoundError
from cashplan.domain.models import (
    Account,
    AdjustmentResult,
    AutoCloseResult,
    BalanceIndicators,
    BalanceSnapshot,
    ChangeEvent,
    Invoice,
    LedgerEntry,
    MonthView,
    Period,
    RecurringRule,
    RuleStats,
    VirtualOccurrence,
)
from cashplan.infrastructure.logging.logger import get_app_logger


class CashflowService:
    """Single entry point wiring every cash-flow use case.

    Consolidated indicators are cached per (owner, period, account) and the
    cache is dropped on every change event published on the bus.
    """

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        invoice_repository: InvoiceRepositoryPort,
        reference_repository: ReferenceRepositoryPort,
        notifier: ChangeNotifierPort,
        period_totals: PeriodTotalsFunctionPort | None = None,
        logger=None,
        usage_logger=None,
        today_provider: Callable[[], date] = date.today,
        include_virtual_card_charges: bool = True,
    ) -> None:
        """Initialize the facade.

        Args:
            rule_repository: Port for recurring rules.
            ledger_repository: Port for ledger entries.
            invoice_repository: Port for card invoices.
            reference_repository: Port for accounts, cards and categories.
            notifier: Change bus shared with other components.
            period_totals: Optional server-side aggregate function.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording user actions.
            today_provider: Clock used for default dates.
            include_virtual_card_charges: Auto-close behaviour for
                unconfirmed recurring card charges.
        """
        self._logger = logger or get_app_logger()
        self._today_provider = today_provider
        self._notifier = notifier
        self._invoice_repository = invoice_repository
        self._indicators_cache: dict[
            tuple[str, Period, int | None], BalanceIndicators
        ] = {}

        self._materializer = MaterializeOccurrencesUseCase(
            rule_repository,
            ledger_repository,
            logger=self._logger,
        )
        self._month_transactions = GetMonthTransactionsUseCase(
            rule_repository,
            ledger_repository,
            invoice_repository,
            reference_repository,
            logger=self._logger,
        )
        self._confirm = ConfirmOccurrenceUseCase(
            rule_repository,
            ledger_repository,
            notifier=notifier,
            logger=self._logger,
            usage_logger=usage_logger,
            today_provider=today_provider,
        )
        self._adjust = ApplyAdjustmentUseCase(
            rule_repository,
            ledger_repository,
            notifier=notifier,
            logger=self._logger,
            usage_logger=usage_logger,
        )
        self._invoice_totals = InvoiceTotals(
            ledger_repository,
            rule_repository,
            logger=self._logger,
        )
        self._auto_close = AutoCloseInvoicesUseCase(
            invoice_repository,
            self._invoice_totals,
            notifier=notifier,
            logger=self._logger,
            include_virtual_card_charges=include_virtual_card_charges,
        )
        self._calculator = BalanceCalculator(
            ledger_repository,
            rule_repository,
            invoice_repository,
            reference_repository,
            self._month_transactions,
            self._invoice_totals,
            period_totals=period_totals,
            logger=self._logger,
            today_provider=today_provider,
        )
        self._projection = ProjectMonthsUseCase(
            self._calculator,
            logger=self._logger,
        )
        self._rules = ManageRecurringRulesUseCase(
            rule_repository,
            notifier=notifier,
            logger=self._logger,
        )
        self._open_invoice = OpenInvoiceUseCase(
            invoice_repository,
            reference_repository,
            notifier=notifier,
            logger=self._logger,
        )
        self._pay_invoice = PayInvoiceUseCase(
            invoice_repository,
            ledger_repository,
            reference_repository,
            notifier=notifier,
            logger=self._logger,
            today_provider=today_provider,
        )
        self._unsubscribe = notifier.subscribe(self._invalidate)

    def close(self) -> None:
        """Detach from the change bus."""
        self._unsubscribe()

    # Month view

    def materialize(
        self,
        owner_id: str,
        period: Period,
    ) -> list[VirtualOccurrence]:
        return self._materializer.execute(owner_id, period)

    def for_month(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> MonthView:
        return self._month_transactions.execute(owner_id, period, account_id)

    # Workflows

    def confirm(
        self,
        owner_id: str,
        rule_id: int,
        target_date: date | None = None,
    ) -> LedgerEntry:
        return self._confirm.execute(owner_id, rule_id, target_date)

    def apply_adjustment(
        self,
        owner_id: str,
        mode: AdjustmentMode | str,
        rule_id: int,
        period: Period,
        amount=None,
        note: str | None = None,
    ) -> AdjustmentResult:
        return self._adjust.execute(
            owner_id,
            mode,
            rule_id,
            period,
            amount=amount,
            note=note,
        )

    # Balances

    def current_balance(
        self,
        owner_id: str,
        accounts: Sequence[Account] | None = None,
        as_of: date | None = None,
    ) -> BalanceSnapshot:
        return self._calculator.current_balance(owner_id, accounts, as_of)

    def projected_balance(
        self,
        owner_id: str,
        accounts: Sequence[Account] | None = None,
        horizon: date | None = None,
    ) -> BalanceSnapshot:
        self._auto_close_best_effort(owner_id)
        return self._calculator.projected_balance(owner_id, accounts, horizon)

    def consolidated_indicators(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> BalanceIndicators:
        """Return cached indicators, recomputing after any change event."""
        self._auto_close_best_effort(owner_id)
        key = (owner_id, period, account_id)
        cached = self._indicators_cache.get(key)
        if cached is not None:
            return cached
        indicators = self._calculator.consolidated_indicators(
            owner_id,
            period,
            account_id,
        )
        if not indicators.partial:
            self._indicators_cache[key] = indicators
        return indicators

    def project_months(
        self,
        owner_id: str,
        start: Period,
        months: int,
        account_id: int | None = None,
    ) -> list[BalanceIndicators]:
        self._auto_close_best_effort(owner_id)
        return self._projection.execute(owner_id, start, months, account_id)

    # Invoices

    def auto_close_due(
        self,
        owner_id: str,
        as_of: date | None = None,
    ) -> AutoCloseResult:
        return self._auto_close.execute(
            owner_id,
            as_of or self._today_provider(),
        )

    def open_invoice(
        self,
        owner_id: str,
        card_id: int,
        period: Period,
    ) -> Invoice:
        return self._open_invoice.execute(owner_id, card_id, period)

    def invoice_total(self, owner_id: str, invoice_id: int) -> Decimal:
        """Return the frozen total of a closed invoice or the running one."""
        invoice = self._invoice_repository.get(owner_id, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        if invoice.status is not InvoiceStatus.OPEN:
            return invoice.total_amount
        return self._invoice_totals.dynamic_total(invoice)

    def pay_invoice(
        self,
        owner_id: str,
        invoice_id: int,
        account_id: int | None = None,
        paid_on: date | None = None,
    ) -> Invoice:
        return self._pay_invoice.execute(
            owner_id,
            invoice_id,
            account_id,
            paid_on,
        )

    # Rules

    def list_rules(
        self,
        owner_id: str,
        active_only: bool = False,
    ) -> list[RecurringRule]:
        return self._rules.list_rules(owner_id, active_only)

    def create_rule(self, owner_id: str, /, **fields) -> RecurringRule:
        return self._rules.create(owner_id, **fields)

    def update_rule(
        self,
        owner_id: str,
        rule_id: int,
        /,
        **changes,
    ) -> RecurringRule:
        return self._rules.update(owner_id, rule_id, **changes)

    def set_rule_active(
        self,
        owner_id: str,
        rule_id: int,
        active: bool,
    ) -> RecurringRule:
        return self._rules.set_active(owner_id, rule_id, active)

    def delete_rule(self, owner_id: str, rule_id: int) -> None:
        self._rules.delete(owner_id, rule_id)

    def rule_stats(self, owner_id: str) -> RuleStats:
        return self._rules.stats(owner_id)

    def _auto_close_best_effort(self, owner_id: str) -> None:
        result = self._auto_close.execute(owner_id, self._today_provider())
        if result.failures:
            self._logger.warning(
                f"Auto-close finished with {len(result.failures)} failures"
            )

    def _invalidate(self, event: ChangeEvent) -> None:
        if self._indicators_cache:
            self._logger.debug(
                f"Dropping {len(self._indicators_cache)} cached indicators "
                f"after {event.change_type.value} event"
            )
        self._indicators_cache.clear()


__all__ = ["CashflowService"]
