"""Database layer: ORM models, engine/session helpers and store repositories."""
