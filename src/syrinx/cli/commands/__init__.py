"""CLI command groups, one module per verb."""
