"""PostgreSQL access: connection pool and repositories."""

from app.database.connection import (
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
    is_database_available,
)


__all__ = [
    "check_database_health",
    "close_database_pool",
    "get_database_pool",
    "init_database_pool",
    "is_database_available",
]
