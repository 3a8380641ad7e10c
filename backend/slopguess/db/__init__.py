"""Database Infrastructure - SQLAlchemy Base and word bank seed data."""
