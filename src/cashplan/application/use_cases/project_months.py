"""Use case projecting indicators over consecutive months."""

from dataclasses import replace

from cashplan.application.use_cases.calculate_balances import (
    BalanceCalculator,
)
from cashplan.domain.errors import ValidationError
from cashplan.domain.models import BalanceIndicators, Period
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.utils.decimal_utils import to_money


class ProjectMonthsUseCase:
    """Chain monthly indicators so each month opens at the previous end."""

    def __init__(self, calculator: BalanceCalculator, logger=None) -> None:
        """Initialize the use case.

        Args:
            calculator: Balance calculator producing monthly indicators.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._calculator = calculator
        self._logger = logger or get_app_logger()

    def execute(
        self,
        owner_id: str,
        start: Period,
        months: int,
        account_id: int | None = None,
    ) -> list[BalanceIndicators]:
        """Return indicators for ``months`` periods starting at ``start``.

        The first month opens at the recorded balance; later months open at
        the projected end balance of the month before.

        Raises:
            ValidationError: If ``months`` is not positive.
        """
        if months < 1:
            raise ValidationError("Projection needs at least one month")
        results: list[BalanceIndicators] = []
        for offset in range(months):
            period = start.shift(offset)
            indicators = self._calculator.consolidated_indicators(
                owner_id,
                period,
                account_id,
            )
            if results:
                opening = results[-1].projected_end_balance
                indicators = replace(
                    indicators,
                    opening_balance=opening,
                    projected_end_balance=to_money(
                        opening + indicators.net_flow
                    ),
                )
            results.append(indicators)
        self._logger.info(
            f"Projected {months} months from {start}: "
            f"end balance {results[-1].projected_end_balance}"
        )
        return results


__all__ = ["ProjectMonthsUseCase"]
