"""Application layer: ports, use cases and the cash-flow facade."""
