"""Token artifacts produced by the credential chain."""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_FRACTION = re.compile(r'\.(\d+)')


def parse_instant(value: str) -> datetime:
    """Parse an upstream ISO-8601 timestamp into an aware UTC datetime.

    The Xbox services emit 7 fractional digits and a trailing ``Z``;
    both are normalised before handing off to ``fromisoformat``.
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    text = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


@dataclass
class AuthToken:
    """OAuth token endpoint response (step 1)."""

    access_token: str
    refresh_token: str
    expires_in: int
    scope: str
    token_type: str = "bearer"
    user_id: str = ""

    @property
    def rps_ticket(self) -> str:
        """Access token in the form the Xbox user-token endpoint expects."""
        return f"d={self.access_token}"


@dataclass
class XboxTicket:
    """Common shape of the user and XSTS token responses."""

    token: str
    issue_instant: datetime
    not_after: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.not_after <= _now(now)


@dataclass
class UserToken(XboxTicket):
    """Xbox Live user token (step 2)."""


@dataclass
class SecurityToken(XboxTicket):
    """XSTS token scoped to the Halo Waypoint relying party (step 3)."""


@dataclass
class ServiceToken:
    """Spartan token authorising stats calls (step 4)."""

    token: str
    expires_at: str
    token_duration: str = ""

    @property
    def expires(self) -> datetime:
        return parse_instant(self.expires_at)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires <= _now(now)


@dataclass
class SpartanSession:
    """What the caller carries forward after a successful chain."""

    token: str
    expires_at: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {
            'token': self.token,
            'expires_at': self.expires_at,
            'refresh_token': self.refresh_token,
        }
