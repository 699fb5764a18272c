"""Persistencia SQL (SQLAlchemy Core async)."""
