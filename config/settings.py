"""Application settings and configuration."""
import os
from pathlib import Path
from typing import Dict, Iterable, List
from dotenv import load_dotenv

from domain.exceptions import ConfigurationError

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


class Settings:
    """
    Static configuration for the gateway.

    Values are read from the environment when the instance is created, so
    tests can build a fresh ``Settings()`` after patching ``os.environ``.
    Identity-provider keys have no defaults: the OAuth flow cannot work
    without them and a missing one is a startup failure.
    """

    # Keys the credential chain cannot run without.
    AUTH_KEYS = (
        'AUTH_BASE_URL',
        'AUTH_TOKEN_URL',
        'AUTH_CLIENT_ID',
        'AUTH_CLIENT_SECRET',
        'AUTH_REDIRECT_URI',
        'XBOX_AUTH_URL',
        'XBOX_XSTS_URL',
        'SPARTAN_TOKEN_URL',
    )

    # ── Pagination ─────────────────────────────────────────────────────────
    # The stats service refuses windows larger than 25 rows; one row is
    # reserved as the has-next lookahead.
    MAX_PAGE_SIZE:         int = 24
    MATCH_HISTORY_CEILING: int = 10000

    def __init__(self) -> None:
        # ── Identity provider ──────────────────────────────────────────────
        self.AUTH_BASE_URL:      str = os.getenv('AUTH_BASE_URL', '')
        self.AUTH_TOKEN_URL:     str = os.getenv('AUTH_TOKEN_URL', '')
        self.AUTH_CLIENT_ID:     str = os.getenv('AUTH_CLIENT_ID', '')
        self.AUTH_CLIENT_SECRET: str = os.getenv('AUTH_CLIENT_SECRET', '')
        self.AUTH_REDIRECT_URI:  str = os.getenv('AUTH_REDIRECT_URI', '')
        self.XBOX_AUTH_URL:      str = os.getenv('XBOX_AUTH_URL', '')
        self.XBOX_XSTS_URL:      str = os.getenv('XBOX_XSTS_URL', '')
        self.SPARTAN_TOKEN_URL:  str = os.getenv('SPARTAN_TOKEN_URL', '')

        # ── Stats service ──────────────────────────────────────────────────
        self.STATS_BASE_URL:   str = os.getenv('STATS_BASE_URL',   'https://halostats.svc.halowaypoint.com')
        self.SKILL_BASE_URL:   str = os.getenv('SKILL_BASE_URL',   'https://skill.svc.halowaypoint.com')
        self.PROFILE_BASE_URL: str = os.getenv('PROFILE_BASE_URL', 'https://profile.svc.halowaypoint.com')

        # ── HTTP ───────────────────────────────────────────────────────────
        self.REQUEST_TIMEOUT: float = float(os.getenv('REQUEST_TIMEOUT', '30'))

        # ── Skill batching ─────────────────────────────────────────────────
        self.SKILL_AUTO_DISPATCH: bool = os.getenv('SKILL_AUTO_DISPATCH', 'true').strip().lower() == 'true'

        # ── Logging ────────────────────────────────────────────────────────
        self.LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
        self.BASE_DIR:  Path = Path(__file__).resolve().parent.parent
        log_dir = os.getenv('LOG_DIR', '')
        self.LOG_DIR:   Path = Path(log_dir) if log_dir else self.BASE_DIR / 'data' / 'logs'

    def missing(self, keys: Iterable[str]) -> List[str]:
        return [k for k in keys if not getattr(self, k, '')]

    def require(self, *keys: str) -> Dict[str, str]:
        """Return the named values, raising if any of them is unset."""
        missing = self.missing(keys)
        if missing:
            raise ConfigurationError(missing)
        return {k: getattr(self, k) for k in keys}

    def validate(self) -> None:
        self.require(*self.AUTH_KEYS)


settings = Settings()
