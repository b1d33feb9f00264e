"""CLI adapter creating the cash-flow tables.

This module wires the schema helper to the concrete database adapter and
reports which tables were created.
"""

from cashplan.infrastructure.container import build_database_adapter
from cashplan.infrastructure.logging.logger import get_app_logger
from cashplan.infrastructure.schema import ensure_schema


def main() -> None:
    """Create missing tables in the configured database."""
    logger = get_app_logger()
    engine = build_database_adapter().get_engine()
    logger.info(f"Cashplan DB: {engine.url}")

    created = ensure_schema(engine)

    if created:
        print(f"Created {len(created)} tables: {', '.join(created)}")
    else:
        print("Schema already up to date.")


if __name__ == "__main__":  # pragma: no cover
    main()
