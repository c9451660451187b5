"""Presentation layer - User interfaces."""
from .cli import TokenCommand, RedirectUrlCommand, PlayerCommand

__all__ = [
    "TokenCommand",
    "RedirectUrlCommand",
    "PlayerCommand",
]
