"""External integrations (email)."""
