"""Shared fixtures and in-memory fakes for the cashplan test-suite."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

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
from cashplan.domain.models import (
    Account,
    Card,
    Category,
    Invoice,
    LedgerEntry,
    Period,
    RecurringRule,
    ReferenceData,
)
from cashplan.infrastructure.logging import logger as logger_module

OWNER = "owner-1"


@pytest.fixture(autouse=True)
def _logs_in_tmp(tmp_path, monkeypatch):
    """Keep log files created during tests out of the project tree."""
    monkeypatch.setattr(logger_module, "get_project_root", lambda: tmp_path)


class FakeRuleRepository:
    """Dictionary-backed RecurringRuleRepositoryPort."""

    def __init__(self, rules=()) -> None:
        self.rules = {rule.id: rule for rule in rules}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise DataAccessError("rules unavailable")

    def get(self, owner_id, rule_id):
        self._check()
        rule = self.rules.get(rule_id)
        if rule is None or rule.owner_id != owner_id:
            return None
        return rule

    def list_rules(
        self,
        owner_id,
        *,
        active_only=False,
        period=None,
        card_id=None,
    ):
        self._check()
        result = []
        for rule in self.rules.values():
            if rule.owner_id != owner_id:
                continue
            if active_only and not rule.active:
                continue
            if period is not None and not rule.is_in_effect(period):
                continue
            if card_id is not None and rule.card_id != card_id:
                continue
            result.append(rule)
        return sorted(result, key=lambda rule: (rule.day_of_month, rule.id))

    def create(self, owner_id, **fields):
        self._check()
        rule_id = max(self.rules, default=0) + 1
        rule = RecurringRule(id=rule_id, owner_id=owner_id, **fields)
        self.rules[rule_id] = rule
        return rule

    def update(self, rule):
        self._check()
        if self.get(rule.owner_id, rule.id) is None:
            raise NotFoundError("Recurring rule", rule.id)
        self.rules[rule.id] = rule
        return rule

    def update_amount(self, owner_id, rule_id, amount, note=None):
        rule = self.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)
        changes = {"amount": amount}
        if note is not None:
            changes["note"] = note
        return self.update(replace(rule, **changes))

    def set_active(self, owner_id, rule_id, active):
        rule = self.get(owner_id, rule_id)
        if rule is None:
            raise NotFoundError("Recurring rule", rule_id)
        return self.update(replace(rule, active=active))

    def delete(self, owner_id, rule_id):
        if self.get(owner_id, rule_id) is None:
            raise NotFoundError("Recurring rule", rule_id)
        del self.rules[rule_id]


class FakeLedgerRepository:
    """Dictionary-backed LedgerRepositoryPort enforcing one realization."""

    def __init__(self, entries=()) -> None:
        self.entries = {entry.id: entry for entry in entries}
        self.fail = False
        self.failing_accounts: set[int] = set()
        self.created: list[LedgerEntry] = []

    def _check(self, account_id=None) -> None:
        if self.fail or (
            account_id is not None and account_id in self.failing_accounts
        ):
            raise DataAccessError("ledger unavailable")

    def list_entries(
        self,
        owner_id,
        *,
        start_date=None,
        end_date=None,
        account_id=None,
        card_id=None,
        statuses=None,
        rule_id=None,
    ):
        self._check(account_id)
        statuses = set(statuses) if statuses is not None else None
        result = []
        for entry in self.entries.values():
            if entry.owner_id != owner_id:
                continue
            if start_date is not None and entry.entry_date < start_date:
                continue
            if end_date is not None and entry.entry_date > end_date:
                continue
            if account_id is not None and entry.account_id != account_id:
                continue
            if card_id is not None and entry.card_id != card_id:
                continue
            if statuses is not None and entry.status not in statuses:
                continue
            if rule_id is not None and entry.rule_id != rule_id:
                continue
            result.append(entry)
        return sorted(result, key=lambda entry: (entry.entry_date, entry.id))

    def find_realization(self, owner_id, rule_id, period):
        self._check()
        matches = [
            entry
            for entry in self.entries.values()
            if entry.owner_id == owner_id
            and entry.rule_id == rule_id
            and entry.realized_period == period
        ]
        return min(matches, key=lambda entry: entry.id) if matches else None

    def create(self, entry):
        self._check()
        if entry.is_realization and self.find_realization(
            entry.owner_id,
            entry.rule_id,
            entry.realized_period,
        ):
            raise DuplicateRealizationError(
                entry.rule_id,
                entry.realized_period.key,
            )
        entry_id = max(self.entries, default=0) + 1
        stored = replace(entry, id=entry_id)
        self.entries[entry_id] = stored
        self.created.append(stored)
        return stored

    def replace_realization(self, entry):
        self._check()
        if entry.id not in self.entries:
            raise NotFoundError("Ledger entry", entry.id)
        self.entries[entry.id] = entry
        return entry

    def update_status(self, owner_id, entry_id, status):
        self._check()
        entry = self.entries.get(entry_id)
        if entry is None or entry.owner_id != owner_id:
            raise NotFoundError("Ledger entry", entry_id)
        updated = replace(entry, status=status)
        self.entries[entry_id] = updated
        return updated


class FakeInvoiceRepository:
    """Dictionary-backed InvoiceRepositoryPort."""

    def __init__(self, invoices=()) -> None:
        self.invoices = {invoice.id: invoice for invoice in invoices}
        self.fail = False
        self.failing_close: set[int] = set()

    def _check(self) -> None:
        if self.fail:
            raise DataAccessError("invoices unavailable")

    def list_invoices(
        self,
        owner_id,
        *,
        statuses=None,
        card_id=None,
        closing_until=None,
        due_until=None,
        window_overlaps=None,
    ):
        self._check()
        statuses = set(statuses) if statuses is not None else None
        result = []
        for invoice in self.invoices.values():
            if invoice.owner_id != owner_id:
                continue
            if statuses is not None and invoice.status not in statuses:
                continue
            if card_id is not None and invoice.card_id != card_id:
                continue
            if closing_until is not None and invoice.closing_date > closing_until:
                continue
            if due_until is not None and invoice.due_date > due_until:
                continue
            if window_overlaps is not None and not window_overlaps.overlaps(
                invoice.opening_date,
                invoice.closing_date,
            ):
                continue
            result.append(invoice)
        return sorted(result, key=lambda invoice: (invoice.due_date, invoice.id))

    def get(self, owner_id, invoice_id):
        self._check()
        invoice = self.invoices.get(invoice_id)
        if invoice is None or invoice.owner_id != owner_id:
            return None
        return invoice

    def create(self, invoice):
        self._check()
        invoice_id = max(self.invoices, default=0) + 1
        stored = replace(invoice, id=invoice_id)
        self.invoices[invoice_id] = stored
        return stored

    def close(self, owner_id, invoice_id, total_amount):
        self._check()
        if invoice_id in self.failing_close:
            raise DataAccessError(f"cannot close {invoice_id}")
        invoice = self.invoices[invoice_id]
        if invoice.status is not InvoiceStatus.OPEN:
            raise ValidationError("not open")
        closed = replace(
            invoice,
            status=InvoiceStatus.CLOSED,
            total_amount=total_amount,
        )
        self.invoices[invoice_id] = closed
        return closed

    def mark_paid(self, owner_id, invoice_id, paid_entry_id):
        self._check()
        invoice = self.invoices[invoice_id]
        if invoice.status is not InvoiceStatus.CLOSED:
            raise ValidationError("not closed")
        paid = replace(
            invoice,
            status=InvoiceStatus.PAID,
            paid_entry_id=paid_entry_id,
        )
        self.invoices[invoice_id] = paid
        return paid


class FakeReferenceRepository:
    """Static ReferenceRepositoryPort."""

    def __init__(self, accounts=(), cards=(), categories=()) -> None:
        self.accounts = list(accounts)
        self.cards = list(cards)
        self.categories = list(categories)
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise DataAccessError("references unavailable")

    def list_accounts(self, owner_id):
        self._check()
        return [item for item in self.accounts if item.owner_id == owner_id]

    def list_cards(self, owner_id):
        self._check()
        return [item for item in self.cards if item.owner_id == owner_id]

    def list_categories(self, owner_id):
        self._check()
        return list(self.categories)

    def load_reference_data(self, owner_id):
        return ReferenceData(
            accounts={item.id: item for item in self.list_accounts(owner_id)},
            cards={item.id: item for item in self.list_cards(owner_id)},
            categories={
                item.id: item for item in self.list_categories(owner_id)
            },
        )


class RecordingNotifier:
    """ChangeNotifierPort keeping published events in memory."""

    def __init__(self) -> None:
        self.events = []
        self.listeners = []

    def publish(self, event) -> None:
        self.events.append(event)
        for listener in list(self.listeners):
            listener(event)

    def subscribe(self, listener, change_type=None):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)


def make_rule(**overrides) -> RecurringRule:
    values = {
        "id": 1,
        "owner_id": OWNER,
        "description": "Rent",
        "amount": Decimal("1000.00"),
        "kind": RuleKind.EXPENSE,
        "category_id": 10,
        "account_id": 1,
        "card_id": None,
        "day_of_month": 5,
        "start_date": date(2024, 1, 1),
    }
    values.update(overrides)
    return RecurringRule(**values)


def make_card_rule(**overrides) -> RecurringRule:
    values = {
        "description": "Streaming",
        "amount": Decimal("100.00"),
        "kind": RuleKind.CARD_EXPENSE,
        "account_id": None,
        "card_id": 7,
        "day_of_month": 10,
    }
    values.update(overrides)
    return make_rule(**values)


def make_entry(**overrides) -> LedgerEntry:
    values = {
        "id": 100,
        "owner_id": OWNER,
        "description": "Groceries",
        "amount": Decimal("50.00"),
        "entry_date": date(2024, 5, 12),
        "kind": RuleKind.EXPENSE,
        "status": EntryStatus.CONFIRMED,
        "origin": EntryOrigin.MANUAL,
        "account_id": 1,
    }
    values.update(overrides)
    return LedgerEntry(**values)


def make_invoice(**overrides) -> Invoice:
    values = {
        "id": 500,
        "owner_id": OWNER,
        "card_id": 7,
        "period": Period(2024, 5),
        "opening_date": date(2024, 4, 21),
        "closing_date": date(2024, 5, 20),
        "due_date": date(2024, 5, 28),
    }
    values.update(overrides)
    return Invoice(**values)


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def rule_factory():
    return make_rule


@pytest.fixture
def card_rule_factory():
    return make_card_rule


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def invoice_factory():
    return make_invoice


@pytest.fixture
def checking_account() -> Account:
    return Account(
        id=1,
        owner_id=OWNER,
        name="Checking",
        opening_balance=Decimal("1000.00"),
    )


@pytest.fixture
def card() -> Card:
    return Card(
        id=7,
        owner_id=OWNER,
        name="Visa",
        closing_day=20,
        due_day=28,
        payment_account_id=1,
    )


@pytest.fixture
def category() -> Category:
    return Category(id=10, owner_id=OWNER, name="Housing")


@pytest.fixture
def rule_repository():
    return FakeRuleRepository()


@pytest.fixture
def ledger_repository():
    return FakeLedgerRepository()


@pytest.fixture
def invoice_repository():
    return FakeInvoiceRepository()


@pytest.fixture
def reference_repository(checking_account, card, category):
    return FakeReferenceRepository(
        accounts=[checking_account],
        cards=[card],
        categories=[category],
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def logger():
    return MagicMock()
