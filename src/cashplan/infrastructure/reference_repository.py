"""SQLAlchemy repository for accounts, cards and categories."""

from sqlalchemy import or_, select

from cashplan.application.ports.database import DatabaseEnginePort
from cashplan.application.ports.reference_repository import (
    ReferenceRepositoryPort,
)
from cashplan.domain.models import Account, Card, Category, ReferenceData
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import accounts, cards, categories
from cashplan.infrastructure.sqlalchemy_support import data_access
from cashplan.utils.decimal_utils import to_money


class SqlAlchemyReferenceRepository(ReferenceRepositoryPort):
    """Read-only access to reference tables."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def list_accounts(self, owner_id: str) -> list[Account]:
        stmt = (
            select(accounts)
            .where(accounts.c.owner_id == owner_id)
            .order_by(accounts.c.name, accounts.c.id)
        )
        rows = self._fetch("listing accounts", stmt)
        return [
            Account(
                id=row.id,
                owner_id=row.owner_id,
                name=row.name,
                opening_balance=to_money(row.opening_balance),
            )
            for row in rows
        ]

    def list_cards(self, owner_id: str) -> list[Card]:
        stmt = (
            select(cards)
            .where(cards.c.owner_id == owner_id)
            .order_by(cards.c.name, cards.c.id)
        )
        rows = self._fetch("listing cards", stmt)
        return [
            Card(
                id=row.id,
                owner_id=row.owner_id,
                name=row.name,
                closing_day=row.closing_day,
                due_day=row.due_day,
                payment_account_id=row.payment_account_id,
            )
            for row in rows
        ]

    def list_categories(self, owner_id: str) -> list[Category]:
        """Return the owner's categories plus shared ones (no owner)."""
        stmt = (
            select(categories)
            .where(
                or_(
                    categories.c.owner_id == owner_id,
                    categories.c.owner_id.is_(None),
                )
            )
            .order_by(categories.c.name, categories.c.id)
        )
        rows = self._fetch("listing categories", stmt)
        return [
            Category(
                id=row.id,
                owner_id=row.owner_id,
                name=row.name,
                color=row.color,
                icon=row.icon,
            )
            for row in rows
        ]

    def load_reference_data(self, owner_id: str) -> ReferenceData:
        return ReferenceData(
            accounts={item.id: item for item in self.list_accounts(owner_id)},
            cards={item.id: item for item in self.list_cards(owner_id)},
            categories={
                item.id: item for item in self.list_categories(owner_id)
            },
        )

    def _fetch(self, action: str, stmt) -> list:
        with data_access(action, self._logger):
            with self._db_port.get_engine().connect() as conn:
                return conn.execute(stmt).all()


__all__ = ["SqlAlchemyReferenceRepository"]
