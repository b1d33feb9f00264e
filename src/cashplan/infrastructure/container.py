"""Composition root for wiring infrastructure adapters."""

from collections.abc import Callable
from datetime import date

from cashplan.application.cashflow_service import CashflowService
from cashplan.application.ports.database import DatabaseEnginePort
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
from cashplan.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from cashplan.infrastructure.event_bus import ChangeEventBus
from cashplan.infrastructure.invoice_repository import (
    SqlAlchemyInvoiceRepository,
)
from cashplan.infrastructure.ledger_repository import (
    SqlAlchemyLedgerRepository,
)
from cashplan.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from cashplan.infrastructure.period_totals_function import (
    SqlAlchemyPeriodTotalsFunction,
)
from cashplan.infrastructure.reference_repository import (
    SqlAlchemyReferenceRepository,
)
from cashplan.infrastructure.rule_repository import (
    SqlAlchemyRecurringRuleRepository,
)
from cashplan.infrastructure.settings import CashplanSettings


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_rule_repository(
    db_port: DatabaseEnginePort | None = None,
) -> RecurringRuleRepositoryPort:
    """Return the recurring rule repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyRecurringRuleRepository(resolved_db)


def build_ledger_repository(
    db_port: DatabaseEnginePort | None = None,
) -> LedgerRepositoryPort:
    """Return the ledger repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyLedgerRepository(resolved_db)


def build_invoice_repository(
    db_port: DatabaseEnginePort | None = None,
) -> InvoiceRepositoryPort:
    """Return the invoice repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyInvoiceRepository(resolved_db)


def build_reference_repository(
    db_port: DatabaseEnginePort | None = None,
) -> ReferenceRepositoryPort:
    """Return the accounts, cards and categories repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyReferenceRepository(resolved_db)


def build_period_totals_function(
    db_port: DatabaseEnginePort | None = None,
) -> PeriodTotalsFunctionPort:
    """Return the server-side period aggregate."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyPeriodTotalsFunction(resolved_db)


def build_event_bus() -> ChangeNotifierPort:
    """Return a new change bus."""
    return ChangeEventBus()


def build_cashflow_service(
    db_port: DatabaseEnginePort | None = None,
    settings: CashplanSettings | None = None,
    notifier: ChangeNotifierPort | None = None,
    today_provider: Callable[[], date] = date.today,
) -> CashflowService:
    """Return the cash-flow facade wired to SQLAlchemy repositories.

    Args:
        db_port: Optional database adapter shared by every repository.
        settings: Optional settings; read from the environment when omitted.
        notifier: Optional bus shared with other components.
        today_provider: Clock used for default dates.

    Returns:
        CashflowService: Ready-to-use facade.
    """
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or CashplanSettings.from_env()
    return CashflowService(
        rule_repository=build_rule_repository(resolved_db),
        ledger_repository=build_ledger_repository(resolved_db),
        invoice_repository=build_invoice_repository(resolved_db),
        reference_repository=build_reference_repository(resolved_db),
        notifier=notifier or build_event_bus(),
        period_totals=build_period_totals_function(resolved_db),
        logger=get_app_logger(),
        usage_logger=get_usage_logger(),
        today_provider=today_provider,
        include_virtual_card_charges=(
            resolved_settings.include_virtual_card_charges
        ),
    )


__all__ = [
    "build_database_adapter",
    "build_rule_repository",
    "build_ledger_repository",
    "build_invoice_repository",
    "build_reference_repository",
    "build_period_totals_function",
    "build_event_bus",
    "build_cashflow_service",
]
