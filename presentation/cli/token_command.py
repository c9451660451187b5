from __future__ import annotations

import argparse
import json
from typing import Optional

import httpx

from core.logging import get_logger, StructuredLogger
from domain.exceptions import AuthChainError
from infrastructure import AuthConfig, IdentityClient
from application.services import CredentialChain, build_redirect_url


class TokenCommand:
    """Runs the credential chain and prints the resulting spartan session."""

    def __init__(
        self,
        config: Optional[AuthConfig] = None,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.logger: StructuredLogger = get_logger(__name__, service="token-cli")
        # ConfigurationError here is fatal and left to main()
        self.config = config or AuthConfig.from_settings()
        self.session = session

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        grant = parser.add_mutually_exclusive_group(required=True)
        grant.add_argument("--code", help="OAuth authorization code")
        grant.add_argument("--refresh-token", help="OAuth refresh token")

    async def run(self, args: argparse.Namespace) -> int:
        async with IdentityClient(self.config, session=self.session) as identity:
            chain = CredentialChain(identity)
            try:
                session = await chain.exchange(code=args.code, refresh_token=args.refresh_token)
            except AuthChainError as e:
                self.logger.error(lambda: f"token exchange failed: {e}")
                print(json.dumps({"error": str(e), "step": e.step.value}, separators=(",", ":")))
                return 1
        print(json.dumps(session.to_dict(), separators=(",", ":")))
        return 0


class RedirectUrlCommand:
    """Prints the OAuth authorize URL."""

    def __init__(self, config: Optional[AuthConfig] = None) -> None:
        self.config = config or AuthConfig.from_settings()

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        pass

    async def run(self, args: argparse.Namespace) -> int:
        print(build_redirect_url(self.config))
        return 0
