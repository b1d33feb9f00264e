"""Domain validation helpers."""

from datetime import date
from decimal import Decimal, InvalidOperation

from cashplan.domain.constants import (
    MIN_DESCRIPTION_LENGTH,
    AdjustmentMode,
    RuleKind,
)
from cashplan.domain.errors import ValidationError
from cashplan.utils.decimal_utils import coerce_decimal


def parse_kind(value: RuleKind | str) -> RuleKind:
    """Return a RuleKind from an enum or raw string."""
    try:
        return RuleKind(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid rule kind: {value}") from exc


def parse_adjustment_mode(value: AdjustmentMode | str) -> AdjustmentMode:
    try:
        return AdjustmentMode(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid adjustment mode: {value}") from exc


def validate_positive_amount(value, label: str = "Amount") -> Decimal:
    """Return the amount as Decimal, rejecting zero, negatives and junk.

    Args:
        value: Raw amount.
        label: Field name used in the error message.

    Returns:
        Decimal: Validated amount.

    Raises:
        ValidationError: If the amount is missing or not strictly positive.
    """
    if value is None:
        raise ValidationError(f"{label} is required")
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{label} is not a number: {value}") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than zero")
    return amount


def validate_day_of_month(day: int) -> None:
    if not 1 <= day <= 31:
        raise ValidationError("Day of month must be between 1 and 31")


def validate_target(
    kind: RuleKind,
    account_id: int | None,
    card_id: int | None,
) -> None:
    """Check that exactly one of account/card is set, matching the kind."""
    if kind.is_card:
        if card_id is None:
            raise ValidationError("Card is required for card expenses")
        if account_id is not None:
            raise ValidationError("Card expenses cannot target an account")
        return
    if account_id is None:
        raise ValidationError("Account is required for non-card entries")
    if card_id is not None:
        raise ValidationError(
            f"Only card expenses can target a card (kind={kind.value})"
        )


def validate_rule_fields(
    *,
    description: str,
    amount,
    kind: RuleKind | str,
    account_id: int | None,
    card_id: int | None,
    day_of_month: int,
    start_date: date | None,
    end_date: date | None = None,
) -> tuple[RuleKind, Decimal]:
    """Validate recurring rule fields before persistence.

    Returns:
        tuple[RuleKind, Decimal]: Normalized kind and amount.

    Raises:
        ValidationError: On the first invalid field.
    """
    if not description or len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            "Description must have at least "
            f"{MIN_DESCRIPTION_LENGTH} characters"
        )
    normalized_amount = validate_positive_amount(amount)
    normalized_kind = parse_kind(kind)
    validate_day_of_month(day_of_month)
    validate_target(normalized_kind, account_id, card_id)
    if start_date is None:
        raise ValidationError("Start date is required")
    if end_date is not None and end_date < start_date:
        raise ValidationError("End date cannot be before start date")
    return normalized_kind, normalized_amount


__all__ = [
    "parse_kind",
    "parse_adjustment_mode",
    "validate_positive_amount",
    "validate_day_of_month",
    "validate_target",
    "validate_rule_fields",
]
