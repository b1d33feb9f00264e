"""Use case to project recurring rules into a month."""

from cashplan.application.ports.ledger_repository import LedgerRepositoryPort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.errors import DataAccessError
from cashplan.domain.models import Period, VirtualOccurrence
from cashplan.domain.services.materializer import materialize_occurrences
from cashplan.infrastructure.logging.logger import get_app_logger


class MaterializeOccurrencesUseCase:
    """Fetch rules and ledger, then materialize the month's occurrences."""

    def __init__(
        self,
        rule_repository: RecurringRuleRepositoryPort,
        ledger_repository: LedgerRepositoryPort,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            rule_repository: Port providing recurring rules.
            ledger_repository: Port providing ledger entries.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._rule_repository = rule_repository
        self._ledger_repository = ledger_repository
        self._logger = logger or get_app_logger()

    def execute(self, owner_id: str, period: Period) -> list[VirtualOccurrence]:
        """Return virtual occurrences for ``period``.

        A failed fetch yields an empty list instead of an error so that
        read paths keep rendering.

        Args:
            owner_id: Owner whose rules are projected.
            period: Target month.

        Returns:
            list[VirtualOccurrence]: Occurrences sorted by date and rule id.
        """
        try:
            rules = self._rule_repository.list_rules(
                owner_id,
                active_only=True,
                period=period,
            )
            entries = self._ledger_repository.list_entries(
                owner_id,
                start_date=period.first_day,
                end_date=period.last_day,
            )
        except DataAccessError as exc:
            self._logger.error(
                f"Could not materialize occurrences for {period}: {exc}"
            )
            return []
        occurrences = materialize_occurrences(
            rules,
            period,
            entries,
            logger=self._logger,
        )
        self._logger.info(
            f"Materialized {len(occurrences)} occurrences for {period} "
            f"from {len(rules)} rules"
        )
        return occurrences


__all__ = ["MaterializeOccurrencesUseCase"]
