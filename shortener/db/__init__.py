"""Database module for the URL shortener application."""
from shortener.db.base import engine, get_engine, create_tables, DatabaseHealthCheck
from shortener.db.session import get_db, db_transaction

__all__ = [
    "engine",
    "get_engine",
    "create_tables",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
]
