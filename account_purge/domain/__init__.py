"""Domain layer: enums and the deletion error taxonomy (no infrastructure imports)."""
