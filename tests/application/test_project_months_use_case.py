"""Tests for ProjectMonthsUseCase."""

from datetime import date
from decimal import Decimal

import pytest

from cashplan.application.use_cases.calculate_balances import (
    BalanceCalculator,
)
from cashplan.application.use_cases.get_month_transactions import (
    GetMonthTransactionsUseCase,
)
from cashplan.application.use_cases.invoice_totals import InvoiceTotals
from cashplan.application.use_cases.project_months import (
    ProjectMonthsUseCase,
)
from cashplan.domain.constants import RuleKind
from cashplan.domain.errors import ValidationError
from cashplan.domain.models import Period


@pytest.fixture
def use_case(
    rule_repository,
    ledger_repository,
    invoice_repository,
    reference_repository,
    logger,
):
    calculator = BalanceCalculator(
        ledger_repository,
        rule_repository,
        invoice_repository,
        reference_repository,
        GetMonthTransactionsUseCase(
            rule_repository,
            ledger_repository,
            invoice_repository,
            reference_repository,
            logger=logger,
        ),
        InvoiceTotals(ledger_repository, rule_repository, logger=logger),
        logger=logger,
        today_provider=lambda: date(2024, 5, 1),
    )
    return ProjectMonthsUseCase(calculator, logger=logger)


def test_months_chain_end_balance_into_next_opening(
    owner,
    rule_factory,
    rule_repository,
    use_case,
) -> None:
    """Salary 3000 and rent 1000 add 2000 a month to the 1000 opening."""
    rule_repository.rules = {
        1: rule_factory(),
        2: rule_factory(
            id=2,
            description="Salary",
            kind=RuleKind.INCOME,
            amount=Decimal("3000"),
            day_of_month=1,
        ),
    }

    result = use_case.execute(owner, Period(2024, 5), 3)

    assert [item.period for item in result] == [
        Period(2024, 5),
        Period(2024, 6),
        Period(2024, 7),
    ]
    assert [item.opening_balance for item in result] == [
        Decimal("1000.00"),
        Decimal("3000.00"),
        Decimal("5000.00"),
    ]
    assert result[-1].projected_end_balance == Decimal("7000.00")


def test_months_must_be_positive(owner, use_case) -> None:
    with pytest.raises(ValidationError):
        use_case.execute(owner, Period(2024, 5), 0)
