"""Infrastructure adapters for the cashplan engine."""
