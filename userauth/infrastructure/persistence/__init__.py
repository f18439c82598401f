"""Persistence: database session handling, ORM models and repositories."""
