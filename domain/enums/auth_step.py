"""Credential chain step enumeration."""
from enum import Enum


class AuthStep(Enum):
    """The four exchanges of the credential chain, in order."""

    GRANT = "grant"
    USER = "user"
    SECURITY = "security"
    SERVICE = "service"

    @property
    def position(self) -> int:
        """1-based position in the chain."""
        return list(AuthStep).index(self) + 1

    @property
    def label(self) -> str:
        labels = {
            "grant": "OAuth grant",
            "user": "Xbox user token",
            "security": "XSTS token",
            "service": "Spartan token",
        }
        return labels[self.value]
