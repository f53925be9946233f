"""
LeaseLocker command line.

Sub-commands:
    init-table  create the lease table and seed item IDs
    list        print candidate item IDs
    obtain      make one attempt to lease an item
    hold        wait for a lease and heartbeat it until lost or interrupted
"""

import argparse
import asyncio
import logging
import signal
import sys
from datetime import timedelta
from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from leaselocker.config import settings
from leaselocker.db.base import close_db, create_engine, create_session_factory, init_db
from leaselocker.engine import LeaseNotObtained, Locker, StoreUnavailable
from leaselocker.instance import detect_lessee_id, validate_lessee_id
from leaselocker.models import HeartbeatState, StaticLeaseRequest
from leaselocker.observability.log import configure_logging
from leaselocker.stores.sql import LeaseTableConfig, SQLLockerStore

logger = logging.getLogger("leaselocker.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_OBTAINED = 2
EXIT_LOST = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="leaselocker", description="LeaseLocker lease tool")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy async URL (default: LEASELOCKER_DATABASE_URL)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: LEASELOCKER_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-table", help="Create the lease table")
    init_parser.add_argument(
        "--item",
        action="append",
        dest="items",
        default=[],
        help="Item ID to seed (repeatable)",
    )

    subparsers.add_parser("list", help="List candidate item IDs")

    for name, help_text in (
        ("obtain", "Attempt to lease one item"),
        ("hold", "Hold a lease until lost or interrupted"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--lessee-id",
            default=settings.lessee_id,
            help="Lessee identity (default: auto-detected)",
        )
        sub.add_argument(
            "--duration",
            type=float,
            default=settings.lease_duration_seconds,
            help=f"Lease duration in seconds (default: {settings.lease_duration_seconds})",
        )
        if name == "hold":
            sub.add_argument(
                "--heartbeat-interval",
                type=float,
                default=settings.heartbeat_interval_seconds,
                help=f"Seconds between renewals (default: {settings.heartbeat_interval_seconds})",
            )
            sub.add_argument(
                "--poll-interval",
                type=float,
                default=settings.poll_interval_seconds,
                help=f"Seconds between scans (default: {settings.poll_interval_seconds})",
            )

    return parser


def _lease_request(args: argparse.Namespace) -> StaticLeaseRequest:
    lessee_id = args.lessee_id or detect_lessee_id()
    validate_lessee_id(lessee_id, settings.env.value)
    return StaticLeaseRequest(lessee_id, timedelta(seconds=args.duration))


async def _run(args: argparse.Namespace) -> int:
    engine = create_engine(args.database_url)
    store = SQLLockerStore(
        create_session_factory(engine), LeaseTableConfig.from_settings(settings)
    )
    locker = Locker(store, logger=logging.getLogger("leaselocker.locker"))

    try:
        if args.command == "init-table":
            await init_db(engine, store.metadata)
            added = await store.add_items(args.items)
            print(f"Lease table {store.config.table_name} ready ({added} items added)")
            return EXIT_OK

        if args.command == "list":
            for item_id in await store.list_lease_ids():
                print(item_id)
            return EXIT_OK

        try:
            request = _lease_request(args)
        except (RuntimeError, ValueError) as e:
            logger.error(f"Invalid lease request: {e}")
            return EXIT_FAILED

        if args.command == "obtain":
            try:
                lease = await locker.obtain_lease(request)
            except LeaseNotObtained as e:
                logger.info(e.message)
                return EXIT_NOT_OBTAINED
            print(f"{lease.item_id} {lease.expires_at.isoformat()}")
            return EXIT_OK

        if args.heartbeat_interval >= args.duration:
            logger.warning(
                f"Heartbeat interval {args.heartbeat_interval}s is not below lease duration "
                f"{args.duration}s; the lease can expire between renewals"
            )

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                pass  # Windows

        result = await locker.hold(
            request,
            heartbeat_interval=args.heartbeat_interval,
            poll_interval=args.poll_interval,
            stop_event=stop_event,
        )
        logger.info(
            f"Heartbeat ended: state={result.state.value} item={result.item_id} "
            f"renewals={result.renewals}"
        )
        if result.state == HeartbeatState.LOST:
            return EXIT_LOST
        if result.state == HeartbeatState.FAILED:
            return EXIT_FAILED
        return EXIT_OK

    except StoreUnavailable as e:
        logger.error(e.message)
        return EXIT_FAILED
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        return EXIT_FAILED
    finally:
        await close_db(engine)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
