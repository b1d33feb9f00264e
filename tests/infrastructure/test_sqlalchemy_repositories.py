"""Tests for the SQLAlchemy repositories against a SQLite file."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, insert

from cashplan.domain.constants import (
    EntryOrigin,
    EntryStatus,
    InvoiceStatus,
    RuleKind,
)
from cashplan.domain.errors import (
    DataAccessError,
    DuplicateRealizationError,
    NotFoundError,
    ValidationError,
)
from cashplan.domain.models import Installment, Period
from cashplan.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from cashplan.infrastructure.invoice_repository import (
    SqlAlchemyInvoiceRepository,
)
from cashplan.infrastructure.ledger_repository import (
    SqlAlchemyLedgerRepository,
)
from cashplan.infrastructure.period_totals_function import (
    SqlAlchemyPeriodTotalsFunction,
)
from cashplan.infrastructure.reference_repository import (
    SqlAlchemyReferenceRepository,
)
from cashplan.infrastructure.rule_repository import (
    SqlAlchemyRecurringRuleRepository,
)
from cashplan.infrastructure.schema import (
    accounts,
    cards,
    categories,
    ensure_schema,
)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'cashplan.db'}")
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_port(engine):
    return SqlAlchemyDatabaseEngineAdapter(engine)


@pytest.fixture
def seeded(engine, owner):
    with engine.begin() as conn:
        conn.execute(
            insert(accounts).values(
                id=1,
                owner_id=owner,
                name="Checking",
                opening_balance=Decimal("1000.00"),
            )
        )
        conn.execute(
            insert(cards).values(
                id=7,
                owner_id=owner,
                name="Visa",
                closing_day=20,
                due_day=28,
                payment_account_id=1,
            )
        )
        conn.execute(
            insert(categories).values(
                [
                    {"id": 10, "owner_id": owner, "name": "Housing"},
                    {"id": 11, "owner_id": None, "name": "Food"},
                    {"id": 12, "owner_id": "other", "name": "Hidden"},
                ]
            )
        )
    return engine


def test_ensure_schema_reports_new_tables_once(tmp_path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'fresh.db'}")

    created = ensure_schema(engine)

    assert set(created) == {
        "accounts",
        "cards",
        "categories",
        "recurring_rules",
        "ledger_entries",
        "invoices",
    }
    assert ensure_schema(engine) == []
    engine.dispose()


def test_rule_repository_round_trip(owner, db_port) -> None:
    repository = SqlAlchemyRecurringRuleRepository(db_port, logger=MagicMock())

    rule = repository.create(
        owner,
        description="Rent",
        amount=Decimal("1000"),
        kind=RuleKind.EXPENSE,
        category_id=10,
        account_id=1,
        card_id=None,
        day_of_month=31,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
    )
    repository.create(
        owner,
        description="Streaming",
        amount=Decimal("39.9"),
        kind=RuleKind.CARD_EXPENSE,
        category_id=None,
        account_id=None,
        card_id=7,
        day_of_month=10,
        start_date=date(2024, 1, 1),
    )

    assert repository.get(owner, rule.id) == rule
    assert repository.get("other", rule.id) is None
    assert rule.amount == Decimal("1000.00")
    assert [item.day_of_month for item in repository.list_rules(owner)] == [
        10,
        31,
    ]
    assert [
        item.description
        for item in repository.list_rules(owner, period=Period(2024, 7))
    ] == ["Streaming"]
    assert [
        item.description for item in repository.list_rules(owner, card_id=7)
    ] == ["Streaming"]

    updated = repository.update_amount(owner, rule.id, Decimal("1100"), "New")
    assert (updated.amount, updated.note) == (Decimal("1100.00"), "New")
    repository.set_active(owner, rule.id, False)
    assert [
        item.description for item in repository.list_rules(owner, active_only=True)
    ] == ["Streaming"]

    repository.delete(owner, rule.id)
    assert repository.get(owner, rule.id) is None
    with pytest.raises(NotFoundError):
        repository.delete(owner, rule.id)
    with pytest.raises(NotFoundError):
        repository.set_active(owner, rule.id, True)


def test_ledger_enforces_one_realization_per_month(
    owner,
    db_port,
    entry_factory,
) -> None:
    repository = SqlAlchemyLedgerRepository(db_port, logger=MagicMock())
    confirmed = entry_factory(
        id=None,
        rule_id=1,
        entry_date=date(2024, 3, 5),
        origin=EntryOrigin.RECURRING,
    )

    stored = repository.create(confirmed)

    assert stored.id is not None
    assert repository.find_realization(owner, 1, Period(2024, 3)) == stored
    assert repository.find_realization(owner, 1, Period(2024, 4)) is None
    with pytest.raises(DuplicateRealizationError):
        repository.create(confirmed)
    # Manual entries are not realizations and never collide.
    repository.create(entry_factory(id=None))
    repository.create(entry_factory(id=None))
    assert len(repository.list_entries(owner)) == 3


def test_ledger_filters_status_updates_and_installments(
    owner,
    db_port,
    entry_factory,
) -> None:
    repository = SqlAlchemyLedgerRepository(db_port, logger=MagicMock())
    pending = repository.create(
        entry_factory(
            id=None,
            rule_id=2,
            amount=Decimal("80.5"),
            entry_date=date(2024, 5, 8),
            status=EntryStatus.PENDING,
            origin=EntryOrigin.RECURRING_ADJUSTMENT,
        )
    )
    card = repository.create(
        entry_factory(
            id=None,
            kind=RuleKind.CARD_EXPENSE,
            account_id=None,
            card_id=7,
            installment=Installment(index=2, total=10, group_id="tv"),
        )
    )

    assert card.installment == Installment(index=2, total=10, group_id="tv")
    assert repository.list_entries(owner, card_id=7) == [card]
    assert repository.list_entries(
        owner,
        statuses=[EntryStatus.PENDING],
    ) == [pending]
    assert repository.list_entries(
        owner,
        start_date=date(2024, 5, 10),
        end_date=date(2024, 5, 31),
    ) == [card]

    confirmed = repository.update_status(owner, pending.id, EntryStatus.CONFIRMED)
    assert confirmed.status is EntryStatus.CONFIRMED
    assert confirmed.amount == Decimal("80.50")

    skipped = repository.replace_realization(
        entry_factory(
            id=pending.id,
            rule_id=2,
            amount=Decimal("0"),
            entry_date=date(2024, 5, 8),
            origin=EntryOrigin.RECURRING_SKIP,
        )
    )
    assert skipped.origin is EntryOrigin.RECURRING_SKIP
    assert skipped.amount == Decimal("0.00")
    with pytest.raises(NotFoundError):
        repository.update_status(owner, 999, EntryStatus.CONFIRMED)


def test_invoice_lifecycle(owner, db_port, invoice_factory) -> None:
    repository = SqlAlchemyInvoiceRepository(db_port, logger=MagicMock())
    invoice = repository.create(invoice_factory(id=None))

    assert invoice.period == Period(2024, 5)
    assert repository.list_invoices(owner, closing_until=date(2024, 5, 19)) == []
    assert repository.list_invoices(
        owner,
        statuses=[InvoiceStatus.OPEN],
        window_overlaps=Period(2024, 4),
    ) == [invoice]

    closed = repository.close(owner, invoice.id, Decimal("150"))
    assert closed.status is InvoiceStatus.CLOSED
    assert closed.total_amount == Decimal("150.00")
    with pytest.raises(ValidationError, match="is closed, expected open"):
        repository.close(owner, invoice.id, Decimal("1"))

    paid = repository.mark_paid(owner, invoice.id, 42)
    assert (paid.status, paid.paid_entry_id) == (InvoiceStatus.PAID, 42)
    assert repository.list_invoices(owner, due_until=date(2024, 5, 27)) == []
    with pytest.raises(NotFoundError):
        repository.close(owner, 999, Decimal("1"))


def test_invoice_period_is_unique_per_card(
    db_port,
    invoice_factory,
) -> None:
    repository = SqlAlchemyInvoiceRepository(db_port, logger=MagicMock())
    repository.create(invoice_factory(id=None))

    with pytest.raises(DataAccessError):
        repository.create(invoice_factory(id=None))


def test_reference_repository_reads_owner_and_shared_rows(
    owner,
    db_port,
    seeded,
) -> None:
    repository = SqlAlchemyReferenceRepository(db_port, logger=MagicMock())

    references = repository.load_reference_data(owner)

    assert references.accounts[1].opening_balance == Decimal("1000.00")
    assert references.cards[7].payment_account_id == 1
    assert sorted(item.name for item in references.categories.values()) == [
        "Food",
        "Housing",
    ]
    assert repository.list_accounts("other") == []


def test_period_totals_group_by_kind_and_status(
    owner,
    db_port,
    entry_factory,
) -> None:
    ledger = SqlAlchemyLedgerRepository(db_port, logger=MagicMock())
    ledger.create(entry_factory(id=None, amount=Decimal("10")))
    ledger.create(entry_factory(id=None, amount=Decimal("15.25")))
    ledger.create(
        entry_factory(
            id=None,
            kind=RuleKind.INCOME,
            amount=Decimal("500"),
            account_id=2,
        )
    )
    ledger.create(entry_factory(id=None, entry_date=date(2024, 6, 1)))
    function = SqlAlchemyPeriodTotalsFunction(db_port, logger=MagicMock())

    rows = function.fetch_period_totals(owner, Period(2024, 5))
    scoped = function.fetch_period_totals(owner, Period(2024, 5), 1)

    totals = {(row.kind, row.status): row.total for row in rows}
    assert totals == {
        (RuleKind.EXPENSE, EntryStatus.CONFIRMED): Decimal("25.25"),
        (RuleKind.INCOME, EntryStatus.CONFIRMED): Decimal("500.00"),
    }
    assert [(row.kind, row.total) for row in scoped] == [
        (RuleKind.EXPENSE, Decimal("25.25"))
    ]


def test_store_failures_become_data_access_errors(owner, tmp_path) -> None:
    """A database without tables surfaces as DataAccessError."""
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    logger = MagicMock()
    repository = SqlAlchemyRecurringRuleRepository(
        SqlAlchemyDatabaseEngineAdapter(engine),
        logger=logger,
    )

    with pytest.raises(DataAccessError, match="listing rules"):
        repository.list_rules(owner)
    logger.error.assert_called_once()
    engine.dispose()
