"""ChromiQ shared utilities."""
