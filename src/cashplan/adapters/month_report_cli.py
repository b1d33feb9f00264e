"""CLI adapter printing the merged month view and its indicators."""

from datetime import date
import os

from cashplan.domain.errors import ValidationError
from cashplan.domain.models import Period
from cashplan.infrastructure.container import build_cashflow_service
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.settings import CashplanSettings


def _parse_period(value: str | None, logger) -> Period:
    """Parse a ``YYYY-MM`` string, falling back to the current month.

    Args:
        value: Period string.
        logger: Logger used for warnings.

    Returns:
        Period: Parsed or current period.
    """
    if value:
        try:
            return Period.parse(value)
        except ValidationError as exc:
            logger.warning(str(exc))
    return Period.from_date(date.today())


def main() -> None:
    """Print every row of the month followed by consolidated indicators."""
    logger = get_app_logger()
    settings = CashplanSettings.from_env()
    period = _parse_period(os.getenv("CASHPLAN_REPORT_PERIOD"), logger)
    service = build_cashflow_service(settings=settings)

    view = service.for_month(settings.owner_id, period)
    indicators = service.consolidated_indicators(settings.owner_id, period)

    print(f"Month {period} ({len(view)} rows)")
    for row in view:
        marker = "~" if row.is_virtual else " "
        covered = (
            f" [invoice {row.covered_by_invoice_id}]"
            if row.covered_by_invoice_id
            else ""
        )
        print(
            f"{marker} {row.entry_date} {row.kind.value:<12} "
            f"{row.status.value:<9} {row.signed_amount:>12} "
            f"{row.description}{covered}"
        )
    print(
        f"Income: {indicators.total_income} "
        f"(confirmed {indicators.confirmed_income}, "
        f"pending {indicators.pending_income}, "
        f"projected {indicators.projected_recurring_income})"
    )
    print(
        f"Expense: {indicators.total_expense} "
        f"(confirmed {indicators.confirmed_expense}, "
        f"pending {indicators.pending_expense}, "
        f"projected {indicators.projected_recurring_expense})"
    )
    print(
        f"Net flow: {indicators.net_flow}, "
        f"savings rate: {indicators.savings_rate}, "
        f"opening: {indicators.opening_balance}, "
        f"projected end: {indicators.projected_end_balance}"
    )
    if view.partial or indicators.partial:
        print("Warning: some data could not be loaded; totals are partial.")


if __name__ == "__main__":  # pragma: no cover
    main()
