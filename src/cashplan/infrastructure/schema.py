"""SQLAlchemy Core table definitions."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

MONEY = Numeric(14, 2, asdecimal=True)

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("name", String(120), nullable=False),
    Column("opening_balance", MONEY, nullable=False, default=0),
)

cards = Table(
    "cards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("name", String(120), nullable=False),
    Column("closing_day", Integer, nullable=False),
    Column("due_day", Integer, nullable=False),
    Column(
        "payment_account_id",
        Integer,
        ForeignKey("accounts.id"),
        nullable=True,
    ),
)

categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=True, index=True),
    Column("name", String(120), nullable=False),
    Column("color", String(16), nullable=True),
    Column("icon", String(32), nullable=True),
)

recurring_rules = Table(
    "recurring_rules",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("description", String(255), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("kind", String(20), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id")),
    Column("account_id", Integer, ForeignKey("accounts.id")),
    Column("card_id", Integer, ForeignKey("cards.id")),
    Column("day_of_month", Integer, nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    Column("note", Text, nullable=True),
    Column("created_at", DateTime, server_default=func.now()),
)

# realized_period is only set for realizing origins; NULLs never collide.
ledger_entries = Table(
    "ledger_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("description", String(255), nullable=False),
    Column("amount", MONEY, nullable=False),
    Column("entry_date", Date, nullable=False, index=True),
    Column("kind", String(20), nullable=False),
    Column("status", String(20), nullable=False),
    Column("origin", String(32), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id")),
    Column("account_id", Integer, ForeignKey("accounts.id")),
    Column("card_id", Integer, ForeignKey("cards.id")),
    Column("rule_id", Integer, nullable=True),
    Column("realized_period", String(7), nullable=True),
    Column("installment_index", Integer, nullable=True),
    Column("installment_total", Integer, nullable=True),
    Column("installment_group", String(64), nullable=True),
    Column("invoice_id", Integer, nullable=True),
    Column("note", Text, nullable=True),
    Column("created_at", DateTime, server_default=func.now()),
    Index(
        "uq_ledger_entries_rule_period",
        "rule_id",
        "realized_period",
        unique=True,
    ),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("card_id", Integer, ForeignKey("cards.id"), nullable=False),
    Column("reference_period", String(7), nullable=False),
    Column("opening_date", Date, nullable=False),
    Column("closing_date", Date, nullable=False),
    Column("due_date", Date, nullable=False),
    Column("status", String(16), nullable=False),
    Column("total_amount", MONEY, nullable=False, default=0),
    Column("paid_entry_id", Integer, nullable=True),
    UniqueConstraint(
        "card_id",
        "reference_period",
        name="uq_invoices_card_period",
    ),
)


def ensure_schema(engine: Engine) -> list[str]:
    """Create missing tables.

    Args:
        engine: Target engine.

    Returns:
        list[str]: Names of the tables that did not exist before.
    """
    with engine.connect() as conn:
        existing = {
            name
            for name in metadata.tables
            if engine.dialect.has_table(conn, name)
        }
    metadata.create_all(engine)
    return [name for name in metadata.tables if name not in existing]


__all__ = [
    "metadata",
    "accounts",
    "cards",
    "categories",
    "recurring_rules",
    "ledger_entries",
    "invoices",
    "ensure_schema",
]
