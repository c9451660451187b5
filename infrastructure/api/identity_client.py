"""Identity provider client: OAuth, Xbox user token, XSTS, Spartan token."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx

from config import Settings, settings as default_settings
from domain.entities import (
    AuthToken, SecurityToken, ServiceToken, UserToken, XboxTicket, parse_instant,
)
from domain.enums import AuthStep, GrantType
from domain.exceptions import AuthChainError

logger = logging.getLogger(__name__)

OAUTH_SCOPE           = "Xboxlive.signin Xboxlive.offline_access"
USER_RELYING_PARTY    = "http://auth.xboxlive.com"
USER_SITE_NAME        = "user.auth.xboxlive.com"
XSTS_RELYING_PARTY    = "https://prod.xsts.halowaypoint.com/"
XSTS_SANDBOX_ID       = "RETAIL"
SPARTAN_AUDIENCE      = "urn:343:s3:services"
SPARTAN_MIN_VERSION   = "4"
SPARTAN_PROOF_TYPE    = "Xbox_XSTSv3"


@dataclass(frozen=True)
class AuthConfig:
    """Identity-provider endpoints and client credentials."""

    base_url: str
    token_url: str
    client_id: str
    client_secret: str
    redirect_uri: str
    xbox_auth_url: str
    xbox_xsts_url: str
    spartan_token_url: str

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AuthConfig":
        """Raises ``ConfigurationError`` naming every missing key."""
        values = (settings or default_settings).require(*Settings.AUTH_KEYS)
        return cls(
            base_url=values['AUTH_BASE_URL'],
            token_url=values['AUTH_TOKEN_URL'],
            client_id=values['AUTH_CLIENT_ID'],
            client_secret=values['AUTH_CLIENT_SECRET'],
            redirect_uri=values['AUTH_REDIRECT_URI'],
            xbox_auth_url=values['XBOX_AUTH_URL'],
            xbox_xsts_url=values['XBOX_XSTS_URL'],
            spartan_token_url=values['SPARTAN_TOKEN_URL'],
        )


def _field(step: AuthStep, payload: Dict[str, Any], *path: str) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict) or node.get(key) in (None, ""):
            raise AuthChainError(step, f"response missing {'.'.join(path)}")
        node = node[key]
    return node


class IdentityClient:
    """Issues the four token exchanges. Each call maps to one ``AuthStep``."""

    def __init__(
        self,
        config: AuthConfig,
        session: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.config = config
        self.session = session
        self.timeout = timeout if timeout is not None else default_settings.REQUEST_TIMEOUT
        self._owns_session = session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = httpx.AsyncClient(timeout=self.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, *_):
        if self.session and self._owns_session:
            await self.session.aclose()
            self.session = None

    async def _post(self, step: AuthStep, url: str, **kwargs: Any) -> Dict[str, Any]:
        if self.session is None:
            raise RuntimeError("IdentityClient used outside 'async with'")

        try:
            response = await self.session.post(url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(f"{step.label} exchange transport error: {exc}")
            raise AuthChainError(step, f"transport error: {exc}") from exc

        if not response.is_success:
            logger.warning(f"{step.label} exchange rejected with HTTP {response.status_code}")
            raise AuthChainError(step, f"HTTP {response.status_code}", status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthChainError(step, "response body is not JSON") from exc
        if not isinstance(payload, dict):
            raise AuthChainError(step, "response body is not an object")
        return payload

    # ── Step 1: OAuth grant ────────────────────────────────────────────

    async def request_auth_token(self, grant_type: GrantType, grant: str) -> AuthToken:
        step = AuthStep.GRANT
        payload = await self._post(
            step,
            self.config.token_url,
            data={
                "grant_type": grant_type.value,
                "code": grant,
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "approval_prompt": "auto",
                "scope": OAUTH_SCOPE,
                "redirect_uri": self.config.redirect_uri,
            },
        )
        try:
            expires_in = int(_field(step, payload, "expires_in"))
        except (TypeError, ValueError) as exc:
            raise AuthChainError(step, "expires_in is not an integer") from exc
        if expires_in <= 0:
            raise AuthChainError(step, "access token already expired")
        return AuthToken(
            access_token=_field(step, payload, "access_token"),
            refresh_token=_field(step, payload, "refresh_token"),
            expires_in=expires_in,
            scope=payload.get("scope", ""),
            token_type=payload.get("token_type", "bearer"),
            user_id=payload.get("user_id", ""),
        )

    # ── Step 2: Xbox user token ────────────────────────────────────────

    async def request_user_token(self, auth_token: AuthToken) -> UserToken:
        payload = await self._post(
            AuthStep.USER,
            self.config.xbox_auth_url,
            headers={"x-xbl-contract-version": "1"},
            json={
                "RelyingParty": USER_RELYING_PARTY,
                "TokenType": "JWT",
                "Properties": {
                    "AuthMethod": "RPS",
                    "SiteName": USER_SITE_NAME,
                    "RpsTicket": auth_token.rps_ticket,
                },
            },
        )
        return UserToken(**self._ticket_fields(AuthStep.USER, payload))

    # ── Step 3: XSTS token ─────────────────────────────────────────────

    async def request_xsts_token(self, user_token: UserToken) -> SecurityToken:
        payload = await self._post(
            AuthStep.SECURITY,
            self.config.xbox_xsts_url,
            headers={"x-xbl-contract-version": "1"},
            json={
                "RelyingParty": XSTS_RELYING_PARTY,
                "TokenType": "JWT",
                "Properties": {
                    "SandboxId": XSTS_SANDBOX_ID,
                    "UserTokens": [user_token.token],
                },
            },
        )
        return SecurityToken(**self._ticket_fields(AuthStep.SECURITY, payload))

    # ── Step 4: Spartan token ──────────────────────────────────────────

    async def request_spartan_token(self, xsts_token: SecurityToken) -> ServiceToken:
        step = AuthStep.SERVICE
        payload = await self._post(
            step,
            self.config.spartan_token_url,
            headers={"Accept": "application/json"},
            json={
                "Audience": SPARTAN_AUDIENCE,
                "MinVersion": SPARTAN_MIN_VERSION,
                "Proof": [{"Token": xsts_token.token, "TokenType": SPARTAN_PROOF_TYPE}],
            },
        )
        token = ServiceToken(
            token=_field(step, payload, "SpartanToken"),
            expires_at=_field(step, payload, "ExpiresUtc", "ISO8601Date"),
            token_duration=payload.get("TokenDuration", ""),
        )
        try:
            expired = token.is_expired()
        except (TypeError, ValueError) as exc:
            raise AuthChainError(step, "ExpiresUtc is not an ISO-8601 date") from exc
        if expired:
            raise AuthChainError(step, "spartan token already expired")
        return token

    @staticmethod
    def _ticket_fields(step: AuthStep, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            issue_instant = parse_instant(_field(step, payload, "IssueInstant"))
            not_after = parse_instant(_field(step, payload, "NotAfter"))
        except (TypeError, ValueError) as exc:
            raise AuthChainError(step, f"bad timestamp: {exc}") from exc
        fields = {
            "token": _field(step, payload, "Token"),
            "issue_instant": issue_instant,
            "not_after": not_after,
        }
        if XboxTicket(**fields).is_expired():
            raise AuthChainError(step, "token already expired")
        return fields
