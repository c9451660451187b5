"""Main CLI entry-point."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from core.logging import get_logger
from core.logging.config import bootstrap_logging, shutdown_logging
from config import settings
from domain.exceptions import AuthChainError, ConfigurationError, GatewayError

logger = get_logger(__name__, service="gateway")


def _build_parser() -> argparse.ArgumentParser:
    # Lazy imports here so --help works without any identity settings
    from presentation.cli import PlayerCommand, RedirectUrlCommand, TokenCommand

    parser = argparse.ArgumentParser(
        prog="halo-stats-gateway",
        description="Halo Infinite stats gateway: credential chain and player queries.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    token = sub.add_parser("token", help="exchange an OAuth code or refresh token for a spartan token")
    TokenCommand.add_arguments(token)
    token.set_defaults(factory=TokenCommand)

    redirect = sub.add_parser("redirect-url", help="print the OAuth authorize URL")
    RedirectUrlCommand.add_arguments(redirect)
    redirect.set_defaults(factory=RedirectUrlCommand)

    player = sub.add_parser("player", help="resolve a player query and print it as JSON")
    PlayerCommand.add_arguments(player)
    player.set_defaults(factory=PlayerCommand)

    return parser


def main(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)
    bootstrap_logging(
        service="gateway",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_file_name="gateway.jsonl",
    )
    try:
        command = args.factory()
        return asyncio.run(command.run(args))
    except ConfigurationError as e:
        logger.critical(lambda: str(e))
        print(json.dumps({"error": str(e), "missing": e.missing}), file=sys.stderr)
        return 2
    except AuthChainError as e:
        logger.error(lambda: str(e))
        return 1
    except GatewayError as e:
        logger.error(lambda: f"{type(e).__name__}: {e}")
        print(json.dumps({"error": str(e), "type": type(e).__name__}), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning(lambda: "interrupted")
        return 130
    finally:
        shutdown_logging()


def cli() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
