"""LeaseLocker database layer."""

from leaselocker.db.base import (
    close_db,
    create_engine,
    create_session_factory,
    init_db,
)

__all__ = [
    "close_db",
    "create_engine",
    "create_session_factory",
    "init_db",
]
