from __future__ import annotations

import argparse
import json
import os
from typing import Optional

import httpx

from config import settings
from core.logging import get_logger, StructuredLogger
from infrastructure import HaloStatsClient, StatsRepository
from application.use_cases import PageArgs, PlayerQuery, PlayerQueryResolver, QueryContext


class PlayerCommand:
    """Resolves a player query tree and prints it as JSON."""

    def __init__(self, session: Optional[httpx.AsyncClient] = None) -> None:
        self.logger: StructuredLogger = get_logger(__name__, service="player-cli")
        self.session = session

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("gamertag")
        parser.add_argument(
            "--token",
            default=os.getenv("SPARTAN_TOKEN", ""),
            help="spartan token (defaults to $SPARTAN_TOKEN)",
        )
        parser.add_argument("--first", type=int)
        parser.add_argument("--last", type=int)
        parser.add_argument("--after")
        parser.add_argument("--before")
        parser.add_argument("--teams", action="store_true", help="include teams of each match")
        parser.add_argument("--players", action="store_true", help="include players of each match")
        parser.add_argument("--skill", action="store_true", help="include CSR and expected kills/deaths (implies --players)")
        parser.add_argument("--indent", type=int, default=None)

    @staticmethod
    def build_query(args: argparse.Namespace) -> PlayerQuery:
        return PlayerQuery(
            gamertag=args.gamertag,
            matches=PageArgs(after=args.after, before=args.before, first=args.first, last=args.last),
            teams=PageArgs() if args.teams else None,
            players=PageArgs() if (args.players or args.skill) else None,
            skill=args.skill,
        )

    async def run(self, args: argparse.Namespace) -> int:
        if not args.token:
            print(json.dumps({"error": "a spartan token is required (--token or $SPARTAN_TOKEN)"}))
            return 2

        query = self.build_query(args)
        async with HaloStatsClient(args.token, session=self.session) as client:
            async with QueryContext(
                StatsRepository(client), auto_dispatch=settings.SKILL_AUTO_DISPATCH
            ) as ctx:
                result = await PlayerQueryResolver(ctx).execute(query)

        print(json.dumps(result, indent=args.indent, default=str))
        return 0 if result["data"]["player"] is not None else 1
