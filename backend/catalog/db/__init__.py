"""
Database module for MongoDB connection management.
"""

from catalog.db.mongodb import (
    close_mongo_connection,
    connect_to_mongo,
    db,
    get_database,
    session_kwargs,
    unit_of_work,
)

__all__ = [
    "db",
    "get_database",
    "connect_to_mongo",
    "close_mongo_connection",
    "session_kwargs",
    "unit_of_work",
]
