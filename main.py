#!/usr/bin/env python3
"""
Feed Cache - Main Entry Point
=============================

Keeps registered RSS/Atom feeds cached on disk and serves them to widgets.

Usage:
    python main.py --mode scan                       # Refresh stale feeds once
    python main.py --mode scheduler                  # Scan on an interval
    python main.py --mode api                        # Run API server
    python main.py --mode register --url URL         # Add a feed to the registry
    python main.py --mode show --url URL             # Print cached items
    python main.py --help                            # Show help
"""

import argparse
import json
import sys

from dotenv import load_dotenv

from feedcache.core.engine import RefreshEngine
from feedcache.core.errors import FeedCacheError
from feedcache.scheduler.scheduler import start_scheduler
from feedcache.utils.logger import get_logger, setup_logging


def run_scan(engine: RefreshEngine) -> int:
    report = engine.scan_and_refresh_all()
    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.status != "failed" else 1


def run_register(engine: RefreshEngine, url: str, cache_minutes: int) -> int:
    engine.registry.register(url, cache_minutes)
    record = engine.registry.get(url)
    if record is None:
        print("Nothing registered: feed URL is blank", file=sys.stderr)
        return 1
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def run_show(engine: RefreshEngine, url: str, items: int, cache_minutes: int, warm: bool) -> int:
    cached = engine.get_cached(url, items, cache_minutes, warm_if_empty=warm, privileged=warm)
    print(json.dumps(cached.to_dict(), indent=2, ensure_ascii=False))
    return 0 if cached.items or not cached.error else 1


def run_api(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("feedcache.api.app:app", host=host, port=port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cached feed refresher")
    parser.add_argument(
        "--mode",
        choices=["scan", "scheduler", "api", "register", "show"],
        default="scan",
        help="What to run (default: scan)",
    )
    parser.add_argument("--url", help="Feed URL for register/show")
    parser.add_argument("--items", type=int, default=5, help="Items to show (show mode)")
    parser.add_argument("--cache-minutes", type=int, default=60, help="Requested cache lifetime in minutes")
    parser.add_argument("--warm", action="store_true", help="Fetch once when nothing is cached (show mode)")
    parser.add_argument("--interval", type=int, default=None, help="Scan interval in seconds (scheduler mode)")
    parser.add_argument("--host", default="0.0.0.0", help="API bind host")
    parser.add_argument("--port", type=int, default=8000, help="API bind port")
    return parser


def main(argv=None) -> int:
    load_dotenv()
    setup_logging()
    log = get_logger(__name__)

    args = build_parser().parse_args(argv)

    if args.mode == "api":
        return run_api(args.host, args.port)

    engine = RefreshEngine.from_config()
    try:
        if args.mode == "scheduler":
            log.info("Starting feed scan scheduler")
            start_scheduler(engine, args.interval)
            return 0
        if args.mode == "scan":
            return run_scan(engine)
        if not args.url:
            print(f"--url is required for --mode {args.mode}", file=sys.stderr)
            return 2
        if args.mode == "register":
            return run_register(engine, args.url, args.cache_minutes)
        return run_show(engine, args.url, args.items, args.cache_minutes, args.warm)
    except FeedCacheError as exc:
        log.error("{}", exc.message)
        print(json.dumps(exc.as_dict(), indent=2), file=sys.stderr)
        return 1
    finally:
        engine.fetcher.close()


if __name__ == "__main__":
    sys.exit(main())
