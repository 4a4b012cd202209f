"""Command-line entry point: ``wabot [start|config-check]``."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
import time
from datetime import datetime

from wabot.app import WabotApp
from wabot.config import AppConfig, load_config
from wabot.core.cache import DeletedMessageCache
from wabot.log import get_logger, setup_logging

logger = get_logger(__name__)

_RECONNECT_DELAY = 3


def _file_options(with_defaults: bool) -> argparse.ArgumentParser:
    # Subcommands suppress their defaults so options given before the
    # subcommand name are not overwritten.
    options = argparse.ArgumentParser(add_help=False)
    config_default = "config.yaml" if with_defaults else argparse.SUPPRESS
    env_default = ".env" if with_defaults else argparse.SUPPRESS
    options.add_argument("-c", "--config", default=config_default, help="YAML config file (default: config.yaml)")
    options.add_argument("-e", "--env", default=env_default, help="dotenv file with secrets (default: .env)")
    return options


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wabot",
        description="WhatsApp command bot: AI chat, TikTok/sticker/status tools, group admin and anti-delete",
        parents=[_file_options(with_defaults=True)],
    )
    sub = parser.add_subparsers(dest="command", metavar="{start,config-check}")
    sub.add_parser(
        "start",
        parents=[_file_options(with_defaults=False)],
        help="Connect to the bridge and serve commands (default)",
    )
    sub.add_parser(
        "config-check",
        parents=[_file_options(with_defaults=False)],
        help="Load the config and print a summary",
    )
    parser.set_defaults(command="start")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    if args.command == "config-check":
        _check_config(args.config, args.env)
    else:
        _run(args.config, args.env)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    try:
        config = load_config(config_path, env_path)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Configuration valid: {config_path}")
    print(f"  Owner        : {config.owner.name} ({config.owner.number})")
    print(f"  Trigger      : {config.bot.trigger}")
    print(f"  AI backend   : {config.ai.backend} [{config.ai.model}]")
    print(f"  Bridge       : {config.gateway.bridge_url}")
    print(f"  Temp media   : {config.media.temp_dir}")
    print(f"  Statuses     : {config.media.status_dir}")
    print(f"  Cache size   : {config.cache.max_entries}")
    print(f"  Logging      : {config.log_level} ({config.log_format})")
    print(f"  Notify on .s : {config.features.notify_requester}")


def _run(config_path: str, env_path: str) -> None:
    """Load config and start the application."""
    try:
        config = load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Run 'python install.py' first or copy config.example.yaml to config.yaml")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, config.log_format)
    logged_out = asyncio.run(_serve(config))
    if logged_out:
        print("Session expired. Pair the bridge again (scan the QR) and restart.", file=sys.stderr)


async def _serve(config: AppConfig) -> bool:
    """Run sessions until a signal stops the bot. Returns True on logout."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: _signal_handler())

    cache = DeletedMessageCache(config.cache.max_entries)
    started = (time.monotonic(), datetime.now())

    while True:
        app = WabotApp(config, cache, started=started)
        try:
            await app.start()
        except ConnectionError as e:
            logger.error("gateway_start_failed", error=str(e))
            await app.stop()
            if await _wait_or_stop(stop_event, _RECONNECT_DELAY):
                return False
            continue

        # Wait for shutdown signal, reconnect request, or logout
        waiters = {
            asyncio.create_task(stop_event.wait()),
            asyncio.create_task(app.restart_requested.wait()),
            asyncio.create_task(app.terminate_requested.wait()),
        }
        _, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        for t in pending:
            t.cancel()

        await app.stop()

        if stop_event.is_set():
            return False
        if app.terminate_requested.is_set():
            return True
        logger.info("reconnecting", delay=_RECONNECT_DELAY)
        if await _wait_or_stop(stop_event, _RECONNECT_DELAY):
            return False


async def _wait_or_stop(stop_event: asyncio.Event, delay: float) -> bool:
    """Sleep up to ``delay`` seconds; True if a stop signal arrived meanwhile."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


if __name__ == "__main__":
    main()
