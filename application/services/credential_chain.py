"""Four-step credential exchange producing a Spartan token."""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from core.logging import get_logger, traceable
from domain.entities import SpartanSession
from domain.enums import AuthStep, GrantType
from domain.exceptions import AuthChainError
from infrastructure.api import AuthConfig, IdentityClient
from infrastructure.api.identity_client import OAUTH_SCOPE

logger = get_logger(__name__, service="auth")


class CredentialChain:
    """
    Turns an OAuth code or refresh token into a Spartan token.

    grant ──► user token ──► XSTS token ──► Spartan token

    Steps run strictly in order; the first failure raises
    ``AuthChainError`` tagged with its step and nothing after it runs.
    Nothing is cached: the caller keeps the refresh token and the
    Spartan token that ``exchange`` returns.
    """

    def __init__(self, identity: IdentityClient):
        self.identity = identity

    @property
    def config(self) -> AuthConfig:
        return self.identity.config

    @traceable
    async def exchange(
        self,
        code: Optional[str] = None,
        refresh_token: Optional[str] = None,
    ) -> SpartanSession:
        grant_type = GrantType.for_credentials(code, refresh_token)
        grant = refresh_token if grant_type is GrantType.REFRESH_TOKEN else code
        if not grant:
            raise AuthChainError(AuthStep.GRANT, "an authorization code or refresh token is required")

        logger.info(lambda: f"credential chain start grant={grant_type.value}")

        try:
            auth_token = await self.identity.request_auth_token(grant_type, grant)
            logger.debug(lambda: "step 1/4 grant ok")

            user_token = await self.identity.request_user_token(auth_token)
            logger.debug(lambda: "step 2/4 user token ok")

            xsts_token = await self.identity.request_xsts_token(user_token)
            logger.debug(lambda: "step 3/4 xsts token ok")

            spartan = await self.identity.request_spartan_token(xsts_token)
        except AuthChainError as e:
            logger.warning(lambda: f"credential chain aborted at step {e.step.position}/4: {e}")
            raise
        logger.success(lambda: f"credential chain complete expires_at={spartan.expires_at}")

        return SpartanSession(
            token=spartan.token,
            expires_at=spartan.expires_at,
            refresh_token=auth_token.refresh_token,
        )

    def redirect_url(self) -> str:
        """OAuth authorize URL the interactive client should open."""
        return build_redirect_url(self.config)


def build_redirect_url(config: AuthConfig) -> str:
    query = urlencode([
        ("client_id", config.client_id),
        ("response_type", "code"),
        ("approval_prompt", "auto"),
        ("scope", OAUTH_SCOPE),
        ("redirect_uri", config.redirect_uri),
    ])
    return f"{config.base_url}?{query}"
