"""Logging setup and store error reporting."""

import logging

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def log_store_error(logger: logging.Logger, operation: str, exc: BaseException) -> None:
    """Log a backing store failure with whatever driver detail is available."""
    if isinstance(exc, DBAPIError):
        logger.error(
            f"Lease store error during {operation}: "
            f"{type(exc).__name__} code={exc.code} "
            f"connection_invalidated={exc.connection_invalidated} "
            f"original={exc.orig!r}"
        )
    elif isinstance(exc, SQLAlchemyError):
        logger.error(
            f"Lease store error during {operation}: {type(exc).__name__} code={exc.code} ({exc})"
        )
    else:
        logger.error(f"Lease store error during {operation}: {exc!r}")
