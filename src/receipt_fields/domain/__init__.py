"""Domain types, amount normalization and merchant heuristics."""
