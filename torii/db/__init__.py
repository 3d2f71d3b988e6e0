"""Database access helpers."""

from torii.db.client import DatabaseClient

__all__ = ["DatabaseClient"]
