"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os

import dotenv

from cashplan.infrastructure.logging.logger import get_app_logger

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CashplanSettings:
    """Runtime settings for the cash-flow engine.

    Attributes:
        owner_id: Owner used by the CLIs and dashboard.
        include_virtual_card_charges: Whether auto-close freezes unconfirmed
            recurring card charges into invoice totals.
        projection_months: Default number of months to project.
    """

    owner_id: str = "local"
    include_virtual_card_charges: bool = True
    projection_months: int = 6

    @classmethod
    def from_env(cls) -> "CashplanSettings":
        """Build settings from environment variables (and .env).

        Returns:
            CashplanSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        owner_id = os.getenv("CASHPLAN_OWNER_ID", "").strip() or cls.owner_id
        include_virtual = cls._parse_bool(
            os.getenv("CASHPLAN_INCLUDE_VIRTUAL_ON_CLOSE"),
            default=cls.include_virtual_card_charges,
            logger=logger,
        )
        projection_months = cls._parse_months(
            os.getenv("CASHPLAN_PROJECTION_MONTHS"),
            logger=logger,
        )
        return cls(
            owner_id=owner_id,
            include_virtual_card_charges=include_virtual,
            projection_months=projection_months,
        )

    @staticmethod
    def _parse_bool(raw: str | None, default: bool, logger) -> bool:
        if raw is None or not raw.strip():
            return default
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        logger.warning(f"Ignoring invalid boolean setting value: {raw}")
        return default

    @classmethod
    def _parse_months(cls, raw: str | None, logger) -> int:
        if raw is None or not raw.strip():
            return cls.projection_months
        try:
            months = int(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid CASHPLAN_PROJECTION_MONTHS: {raw}")
            return cls.projection_months
        if months < 1:
            logger.warning(
                f"CASHPLAN_PROJECTION_MONTHS must be positive, got {months}"
            )
            return cls.projection_months
        return months


__all__ = ["CashplanSettings"]
