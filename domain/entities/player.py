"""Player profile entity."""
from dataclasses import dataclass


@dataclass
class Gamerpic:
    small: str = ""
    medium: str = ""
    large: str = ""
    xlarge: str = ""


@dataclass
class Player:
    """Represents a Halo player resolved by gamertag."""

    xuid: str
    gamertag: str
    gamerpic: Gamerpic

    def to_dict(self) -> dict:
        return {
            'id': self.xuid,
            'gamertag': self.gamertag,
            'pic': {
                'small': self.gamerpic.small,
                'medium': self.gamerpic.medium,
                'large': self.gamerpic.large,
                'xlarge': self.gamerpic.xlarge,
            },
        }
