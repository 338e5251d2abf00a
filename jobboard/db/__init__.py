"""
Database module - Supabase Postgres connection and table definitions.
"""
from jobboard.db.postgres import Database, rows_to_dicts
from jobboard.db.tables import metadata

__all__ = [
    "Database",
    "rows_to_dicts",
    "metadata"
]
