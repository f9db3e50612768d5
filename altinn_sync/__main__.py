"""Entry point for the sync service.

Usage::

    python -m altinn_sync run [--force-all] [--since 2024-01-01T08:00:00]
    python -m altinn_sync serve                 # cron scheduler + HTTP trigger
    python -m altinn_sync messages [--details]  # list messages, no downloads
    python -m altinn_sync add-tenant ORG HOST PATH --watermark 20240101
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime

from .config import SyncConfig
from .logging import setup_logging
from .models import OutcomeStatus, TenantConfig


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="altinn_sync")
    sub = parser.add_subparsers(dest="mode", required=True)

    run = sub.add_parser("run", help="sync all tenants once")
    run.add_argument("--force-all", action="store_true", help="ignore watermarks and fetch everything")
    run.add_argument("--since", type=datetime.fromisoformat, help="fetch messages created after this")

    sub.add_parser("serve", help="run on the configured cron schedule")

    messages = sub.add_parser("messages", help="list every tenant's messages")
    messages.add_argument("--details", action="store_true", help="re-fetch each message's detail")

    add = sub.add_parser("add-tenant", help="register a tenant in the store")
    add.add_argument("org_id")
    add.add_argument("host")
    add.add_argument("storage_path")
    add.add_argument("--credential-ref", default="default")
    add.add_argument("--watermark", type=int, required=True, help="initial watermark date, YYYYMMDD")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _parser().parse_args(argv)
    config = SyncConfig()
    setup_logging(json=config.log_json, level=config.log_level)

    from .service import SyncService

    service = SyncService(config)

    if args.mode == "run":
        report = asyncio.run(service.run_once(args.force_all, args.since))
        if report.count(OutcomeStatus.FAILED):
            sys.exit(1)

    elif args.mode == "serve":
        asyncio.run(service.serve())

    elif args.mode == "messages":
        for entry in asyncio.run(service.list_messages(args.details)):
            print(entry.model_dump_json())

    elif args.mode == "add-tenant":
        tenant = TenantConfig(
            org_id=args.org_id,
            host=args.host,
            storage_path=args.storage_path,
            credential_ref=args.credential_ref,
            watermark_date=args.watermark,
        )

        async def _add() -> None:
            await service.store.create_schema()
            try:
                await service.store.add(tenant)
            finally:
                await service.store.close()

        asyncio.run(_add())


if __name__ == "__main__":
    main()
