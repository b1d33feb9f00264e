"""Recurring-transaction projection and balance engine."""

__version__ = "0.1.0"
