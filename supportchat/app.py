"""supportchat — main application entry point."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FILE = Path.home() / ".supportchat" / "logs" / "supportchat.log"


def _configure_logging(level_name: str, log_file: Path) -> None:
    """Send logs to a rotating file; the terminal belongs to the TUI."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.handlers.clear()
    handler = RotatingFileHandler(
        log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"
    ))
    root.addHandler(handler)
    # Keep HTTP internals (and their headers) out of the log.
    for name in ("aiohttp", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


async def _check_once(config, prompt: str) -> int:
    """Send a single prompt through the real client and print the reply."""
    from supportchat.tui.app import build_orchestrator

    orchestrator = build_orchestrator(config)
    try:
        if not await orchestrator.client.initialize():
            print("Error: inference module failed to initialize (see log).")
            return 1
        reply = await orchestrator.submit(prompt)
    finally:
        await orchestrator.client.close()
    if reply is None:
        print("Error: prompt is empty.")
        return 2
    print(reply.text)
    return 1 if reply.is_error else 0


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        prog="supportchat",
        description="Support chat — terminal chat widget backed by an inference service",
    )
    parser.add_argument(
        "--config", metavar="PATH",
        help="YAML config file (chat and inference sections)",
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Use offline demo replies instead of the inference service",
    )
    parser.add_argument(
        "--log-level", metavar="LEVEL",
        help="Log level (default: from config, INFO)",
    )
    parser.add_argument(
        "--log-file", metavar="PATH",
        help=f"Log file path (default: {DEFAULT_LOG_FILE})",
    )
    parser.add_argument(
        "--check", metavar="PROMPT",
        help="Send one prompt without the TUI, print the reply and exit",
    )
    args = parser.parse_args()

    from supportchat.engine.config import ChatConfig
    from supportchat.engine.errors import ConfigError
    from supportchat.engine.yaml_config import load_yaml_config

    log_level = args.log_level or os.getenv("SUPPORTCHAT_LOG_LEVEL", "INFO")
    log_file = Path(args.log_file) if args.log_file else DEFAULT_LOG_FILE
    _configure_logging(log_level, log_file)
    logger = logging.getLogger(__name__)

    try:
        config = load_yaml_config(args.config) if args.config else ChatConfig.from_env()
    except ConfigError as exc:
        print(f"Error: {exc}")
        sys.exit(2)
    if args.demo:
        config.demo = True
    if not args.log_level and config.log_level.upper() != log_level.upper():
        logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    logger.info(
        "Starting supportchat cwd=%s config=%s demo=%s log=%s",
        Path.cwd(), args.config or "<none>", config.demo, log_file,
    )

    if args.check is not None:
        sys.exit(asyncio.run(_check_once(config, args.check)))

    from supportchat.tui.app import SupportChatApp

    SupportChatApp(config=config).run()


if __name__ == "__main__":
    main()
