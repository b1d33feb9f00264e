"""CLI adapter closing card invoices whose closing date has passed."""

from datetime import date
import os

from cashplan.infrastructure.container import build_cashflow_service
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.settings import CashplanSettings


def _parse_date(value: str | None, logger) -> date | None:
    """Parse an ISO date string into a date.

    Args:
        value: Date string in YYYY-MM-DD format.
        logger: Logger used for warnings.

    Returns:
        date | None: Parsed date or None when invalid.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        )
        return None


def main() -> None:
    """Run invoice auto-close for the configured owner."""
    logger = get_app_logger()
    settings = CashplanSettings.from_env()
    as_of = _parse_date(os.getenv("CASHPLAN_AS_OF"), logger)
    service = build_cashflow_service(settings=settings)

    result = service.auto_close_due(settings.owner_id, as_of)

    print(
        f"Closed {result.closed_count} invoices "
        f"({len(result.failures)} failures)."
    )
    for invoice in result.closed:
        print(
            f"- invoice {invoice.id} card {invoice.card_id} "
            f"{invoice.period}: {invoice.total_amount}"
        )
    for failure in result.failures:
        print(f"! invoice {failure.invoice_id}: {failure.message}")


if __name__ == "__main__":  # pragma: no cover
    main()
