"""Typed change notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from cashplan.domain.constants import RuleKind


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CONFIRM = "confirm"
    ALL = "all"


class ChangeSubtype(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    CARD_EXPENSE = "card_expense"
    RECURRING = "recurring"

    @classmethod
    def from_kind(cls, kind: RuleKind) -> "ChangeSubtype":
        return cls(kind.value)


class EntityKind(str, Enum):
    RULE = "rule"
    LEDGER_ENTRY = "ledger_entry"
    INVOICE = "invoice"


@dataclass(frozen=True)
class ChangeEvent:
    """Something changed in the store; dependent views must recompute."""

    change_type: ChangeType
    subtype: ChangeSubtype | None = None
    entity: EntityKind | None = None
    affected_ids: tuple[int, ...] = ()
    owner_id: str | None = None
    account_ids: tuple[int, ...] = ()
    occurred_at: datetime = field(default_factory=datetime.now)


__all__ = ["ChangeType", "ChangeSubtype", "EntityKind", "ChangeEvent"]
