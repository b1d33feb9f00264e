"""Port for the server-side period aggregate."""

from typing import Protocol

from cashplan.domain.models import Period, PeriodTotalsRow


class PeriodTotalsFunctionPort(Protocol):
    """Port exposing ledger totals grouped by (kind, status) for a month."""

    def fetch_period_totals(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> list[PeriodTotalsRow]:
        """Return aggregated magnitudes for the month."""


__all__ = ["PeriodTotalsFunctionPort"]
