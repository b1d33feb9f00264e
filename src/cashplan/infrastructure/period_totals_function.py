"""Server-side ledger aggregate for one month."""

from sqlalchemy import func, select

from cashplan.application.ports.database import DatabaseEnginePort
from cashplan.application.ports.period_totals import PeriodTotalsFunctionPort
from cashplan.domain.constants import EntryStatus, RuleKind
from cashplan.domain.models import Period, PeriodTotalsRow
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import ledger_entries
from cashplan.infrastructure.sqlalchemy_support import data_access
from cashplan.utils.decimal_utils import to_money


class SqlAlchemyPeriodTotalsFunction(PeriodTotalsFunctionPort):
    """Ledger totals grouped by (kind, status), computed by the database."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def fetch_period_totals(
        self,
        owner_id: str,
        period: Period,
        account_id: int | None = None,
    ) -> list[PeriodTotalsRow]:
        """Return aggregated magnitudes of the month's ledger entries.

        Args:
            owner_id: Owner filter.
            period: Target month.
            account_id: Optional account filter.

        Returns:
            list[PeriodTotalsRow]: One row per (kind, status) present.
        """
        columns = ledger_entries.c
        conditions = [
            columns.owner_id == owner_id,
            columns.entry_date >= period.first_day,
            columns.entry_date <= period.last_day,
        ]
        if account_id is not None:
            conditions.append(columns.account_id == account_id)
        stmt = (
            select(
                columns.kind,
                columns.status,
                func.sum(columns.amount).label("total"),
            )
            .where(*conditions)
            .group_by(columns.kind, columns.status)
        )
        with data_access(f"aggregating totals for {period}", self._logger):
            with self._db_port.get_engine().connect() as conn:
                rows = conn.execute(stmt).all()
        return [
            PeriodTotalsRow(
                kind=RuleKind(row.kind),
                status=EntryStatus(row.status),
                total=to_money(row.total),
            )
            for row in rows
        ]


__all__ = ["SqlAlchemyPeriodTotalsFunction"]
