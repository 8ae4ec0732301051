from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
import structlog
import uvicorn
from dotenv import set_key

from pacearr.domain.entities.exceptions import DebridError
from pacearr.infrastructure.config import AppConfig, load_config
from pacearr.infrastructure.debrid.torbox import TorboxClient
from pacearr.infrastructure.logging.setup import configure_logging, key_prefix
from pacearr.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEBRID_ENV_KEY = "TORBOX_API_KEY"


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pacearr")

    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve", "configure-debrid"],
        help="serve (default) or configure-debrid (verify a Torbox key, write .env).",
    )

    # Server options
    parser.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    parser.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Override metadata directory (meta/, catalog/, stream/).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    # configure-debrid options
    parser.add_argument(
        "--api-key",
        default=None,
        help="Torbox API key for configure-debrid (prompted when omitted).",
    )
    parser.add_argument(
        "--env-out",
        default=".env",
        help="File that configure-debrid writes TORBOX_API_KEY into.",
    )

    return parser.parse_args(argv)


async def _verify_debrid_key(config: AppConfig, api_key: str) -> dict[str, Any] | None:
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    ) as client:
        torbox = TorboxClient(client, base_url=config.torbox.base_url)
        return await torbox.get_user_info(api_key=api_key)


def configure_debrid(config: AppConfig, *, api_key: str | None, env_out: Path) -> int:
    """Verify a Torbox key against the account endpoint and persist it.

    Returns a process exit code: 0 saved or skipped, 1 rejected key,
    2 service unreachable.
    """
    if api_key is None:
        print("Create an account at https://torbox.app, then copy the key from Settings > API.")
        api_key = input("Torbox API key (Enter to skip): ")
    api_key = api_key.strip()

    if not api_key:
        print("Skipped: the addon will serve torrent streams only.")
        return 0

    try:
        user = asyncio.run(_verify_debrid_key(config, api_key))
    except DebridError as e:
        log.error("debrid_key_check_failed", credential=key_prefix(api_key), error=str(e))
        print(f"Could not reach Torbox: {e}")
        return 2

    if user is None:
        log.warning("debrid_key_rejected", credential=key_prefix(api_key))
        print("Invalid API key.")
        return 1

    env_out.touch(exist_ok=True)
    set_key(str(env_out), DEBRID_ENV_KEY, api_key, quote_mode="never")
    log.info(
        "debrid_key_saved",
        credential=key_prefix(api_key),
        env_file=str(env_out),
        plan=user.get("plan"),
    )
    print(f"Verified account {user.get('email', 'unknown')}; wrote {DEBRID_ENV_KEY} to {env_out}.")
    return 0


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once here, then either builds the FastAPI app
    with it or runs the debrid configuration step.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "7000"))

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None
    if dotenv_path is None and Path(".env").is_file():
        dotenv_path = Path(".env")

    cli_overrides: dict[str, Any] = {}
    if args.data_dir:
        cli_overrides["data_dir"] = args.data_dir
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    log_config = configure_logging(config)

    if args.command == "configure-debrid":
        return configure_debrid(config, api_key=args.api_key, env_out=Path(args.env_out))

    # Access lines would carry install-URL credentials; http_request logs redact them.
    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
        access_log=False,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
