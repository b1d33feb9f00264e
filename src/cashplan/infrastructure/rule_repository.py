"""SQLAlchemy repository for recurring rules."""

from datetime import date
from decimal import Decimal

from sqlalchemy import and_, delete, insert, or_, select, update

from cashplan.application.ports.database import DatabaseEnginePort
from cashplan.application.ports.rule_repository import (
    RecurringRuleRepositoryPort,
)
from cashplan.domain.constants import RuleKind
from cashplan.domain.errors import NotFoundError
from cashplan.domain.models import Period, RecurringRule
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import recurring_rules
from cashplan.infrastructure.sqlalchemy_support import data_access
from cashplan.utils.decimal_utils import to_money


def _row_to_rule(row) -> RecurringRule:
    mapping = row._mapping
    return RecurringRule(
        id=mapping["id"],
        owner_id=mapping["owner_id"],
        description=mapping["description"],
        amount=to_money(mapping["amount"]),
        kind=RuleKind(mapping["kind"]),
        category_id=mapping["category_id"],
        account_id=mapping["account_id"],
        card_id=mapping["card_id"],
        day_of_month=mapping["day_of_month"],
        start_date=mapping["start_date"],
        end_date=mapping["end_date"],
        active=bool(mapping["active"]),
        note=mapping["note"],
    )


class SqlAlchemyRecurringRuleRepository(RecurringRuleRepositoryPort):
    """Recurring rules stored in the ``recurring_rules`` table."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the database engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def get(self, owner_id: str, rule_id: int) -> RecurringRule | None:
        stmt = select(recurring_rules).where(
            recurring_rules.c.id == rule_id,
            recurring_rules.c.owner_id == owner_id,
        )
        with data_access(f"reading rule {rule_id}", self._logger):
            with self._db_port.get_engine().connect() as conn:
                row = conn.execute(stmt).first()
        return _row_to_rule(row) if row is not None else None

    def list_rules(
        self,
        owner_id: str,
        *,
        active_only: bool = False,
        period: Period | None = None,
        card_id: int | None = None,
    ) -> list[RecurringRule]:
        """Return rules ordered by due day then id.

        Args:
            owner_id: Owner filter.
            active_only: Exclude deactivated rules.
            period: Keep rules whose date range overlaps this month.
            card_id: Keep rules charged to this card.

        Returns:
            list[RecurringRule]: Matching rules.
        """
        conditions = [recurring_rules.c.owner_id == owner_id]
        if active_only:
            conditions.append(recurring_rules.c.active.is_(True))
        if period is not None:
            conditions.append(recurring_rules.c.start_date <= period.last_day)
            conditions.append(
                or_(
                    recurring_rules.c.end_date.is_(None),
                    recurring_rules.c.end_date >= period.first_day,
                )
            )
        if card_id is not None:
            conditions.append(recurring_rules.c.card_id == card_id)
        stmt = (
            select(recurring_rules)
            .where(and_(*conditions))
            .order_by(recurring_rules.c.day_of_month, recurring_rules.c.id)
        )
        with data_access("listing rules", self._logger):
            with self._db_port.get_engine().connect() as conn:
                rows = conn.execute(stmt).all()
        return [_row_to_rule(row) for row in rows]

    def create(
        self,
        owner_id: str,
        *,
        description: str,
        amount: Decimal,
        kind: RuleKind,
        category_id: int | None,
        account_id: int | None,
        card_id: int | None,
        day_of_month: int,
        start_date: date,
        end_date: date | None = None,
        note: str | None = None,
    ) -> RecurringRule:
        values = {
            "owner_id": owner_id,
            "description": description,
            "amount": to_money(amount),
            "kind": kind.value,
            "category_id": category_id,
            "account_id": account_id,
            "card_id": card_id,
            "day_of_month": day_of_month,
            "start_date": start_date,
            "end_date": end_date,
            "active": True,
            "note": note,
        }
        with data_access("creating rule", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(insert(recurring_rules).values(**values))
                rule_id = result.inserted_primary_key[0]
        return RecurringRule(
            id=rule_id,
            owner_id=owner_id,
            description=description,
            amount=to_money(amount),
            kind=kind,
            category_id=category_id,
            account_id=account_id,
            card_id=card_id,
            day_of_month=day_of_month,
            start_date=start_date,
            end_date=end_date,
            active=True,
            note=note,
        )

    def update(self, rule: RecurringRule) -> RecurringRule:
        return self._update(
            rule.owner_id,
            rule.id,
            {
                "description": rule.description,
                "amount": to_money(rule.amount),
                "kind": rule.kind.value,
                "category_id": rule.category_id,
                "account_id": rule.account_id,
                "card_id": rule.card_id,
                "day_of_month": rule.day_of_month,
                "start_date": rule.start_date,
                "end_date": rule.end_date,
                "active": rule.active,
                "note": rule.note,
            },
        )

    def update_amount(
        self,
        owner_id: str,
        rule_id: int,
        amount: Decimal,
        note: str | None = None,
    ) -> RecurringRule:
        values = {"amount": to_money(amount)}
        if note is not None:
            values["note"] = note
        return self._update(owner_id, rule_id, values)

    def set_active(
        self,
        owner_id: str,
        rule_id: int,
        active: bool,
    ) -> RecurringRule:
        return self._update(owner_id, rule_id, {"active": active})

    def delete(self, owner_id: str, rule_id: int) -> None:
        stmt = delete(recurring_rules).where(
            recurring_rules.c.id == rule_id,
            recurring_rules.c.owner_id == owner_id,
        )
        with data_access(f"deleting rule {rule_id}", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Recurring rule", rule_id)

    def _update(
        self,
        owner_id: str,
        rule_id: int,
        values: dict,
    ) -> RecurringRule:
        stmt = (
            update(recurring_rules)
            .where(
                recurring_rules.c.id == rule_id,
                recurring_rules.c.owner_id == owner_id,
            )
            .values(**values)
        )
        with data_access(f"updating rule {rule_id}", self._logger):
            with self._db_port.get_engine().begin() as conn:
                result = conn.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Recurring rule", rule_id)
        rule = self.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)
        return rule


__all__ = ["SqlAlchemyRecurringRuleRepository"]
