"""Presentation CLI exports."""
from .token_command import TokenCommand, RedirectUrlCommand
from .player_command import PlayerCommand

__all__ = [
    "TokenCommand",
    "RedirectUrlCommand",
    "PlayerCommand",
]
