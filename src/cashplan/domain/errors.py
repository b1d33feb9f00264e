"""Domain error taxonomy."""

from dataclasses import dataclass


class CashplanError(Exception):
    """Base class for engine errors."""


class ValidationError(CashplanError):
    """Input rejected before any persistence attempt."""


class NotFoundError(CashplanError):
    """Referenced entity is missing or belongs to another owner."""

    def __init__(self, entity: str, entity_id) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class DataAccessError(CashplanError):
    """The data store failed to answer a read or write."""


class DuplicateRealizationError(DataAccessError):
    """A rule already has a realizing ledger entry for the month."""

    def __init__(self, rule_id: int, period_key: str) -> None:
        super().__init__(
            f"Rule {rule_id} already realized for {period_key}"
        )
        self.rule_id = rule_id
        self.period_key = period_key


@dataclass(frozen=True)
class PartialComputationError:
    """Non-fatal record of a failed sub-fetch during aggregation.

    Attributes:
        scope: What failed (``account``, ``invoices``, ``rules``...).
        reference: Identifier of the failed item, when there is one.
        message: Underlying error message.
    """

    scope: str
    reference: int | None
    message: str


@dataclass(frozen=True)
class AutoCloseFailure:
    """Non-fatal record of an invoice that could not be auto-closed."""

    invoice_id: int | None
    message: str


__all__ = [
    "CashplanError",
    "ValidationError",
    "NotFoundError",
    "DataAccessError",
    "DuplicateRealizationError",
    "PartialComputationError",
    "AutoCloseFailure",
]
