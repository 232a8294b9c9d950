"""SDK services."""
