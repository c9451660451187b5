"""OAuth grant type enumeration."""
from enum import Enum
from typing import Optional


class GrantType(Enum):
    """Grant submitted to the identity provider token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"

    @classmethod
    def for_credentials(cls, code: Optional[str], refresh_token: Optional[str]) -> 'GrantType':
        """Refresh token wins when both are supplied."""
        return cls.REFRESH_TOKEN if refresh_token else cls.AUTHORIZATION_CODE
