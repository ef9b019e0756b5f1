"""
Main entry point for the OzBargain Deal Notifier.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from aiohttp import web

from .models.config import NotifierConfig
from .orchestrator import DealNotifierService
from .server import create_app
from .services.config_manager import ConfigurationManager
from .services.scheduler import Scheduler
from .services.state_store import JsonFileStateStore
from .utils.error_handling import ConfigurationError
from .utils.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ozb-deal-notifier",
        description="Announce new OzBargain deals to a Discord channel.",
    )
    parser.add_argument("--config", help="Path to a YAML or JSON configuration file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Announce deals new since the last run")
    run_parser.add_argument(
        "--force", action="store_true", help="Announce the whole feed regardless of state"
    )
    run_parser.add_argument("--limit", type=int, help="Maximum number of deals to announce")

    summary_parser = subparsers.add_parser("summary", help="Send a front-page summary")
    summary_parser.add_argument("--limit", type=int, help="Number of deals in the summary")

    subparsers.add_parser("serve", help="Run the HTTP endpoints and the scheduler")
    subparsers.add_parser("schedule", help="Run the scheduler only")

    return parser


def build_service(config: NotifierConfig) -> DealNotifierService:
    return DealNotifierService(config, store=JsonFileStateStore(config.state_file))


async def serve(service: DealNotifierService, config: NotifierConfig) -> None:
    """Serve HTTP and run the scheduler until cancelled."""
    logger = get_logger("main")
    scheduler = Scheduler(service, config.poll_interval, config.summary_hours)

    runner = web.AppRunner(create_app(service, config))
    await runner.setup()
    site = web.TCPSite(runner, config.host, config.port)
    await site.start()
    logger.info("HTTP server listening", extra={"host": config.host, "port": config.port})

    try:
        await scheduler.start()
    finally:
        await scheduler.stop()
        await runner.cleanup()


async def schedule(service: DealNotifierService, config: NotifierConfig) -> None:
    scheduler = Scheduler(service, config.poll_interval, config.summary_hours)
    try:
        await scheduler.start()
    finally:
        await scheduler.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigurationManager(args.config).load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_dir, config.log_level)
    logger = get_logger("main")
    logger.info("Starting OzBargain Deal Notifier", extra={"command": args.command})

    service = build_service(config)

    try:
        if args.command == "run":
            result = service.run(force=args.force, limit=args.limit)
        elif args.command == "summary":
            result = service.run_summary(label="manual", limit=args.limit)
        elif args.command == "serve":
            asyncio.run(serve(service, config))
            return 0
        else:
            asyncio.run(schedule(service, config))
            return 0
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
        return 0

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
