"""Domain interfaces."""
from .repository import IStatsRepository

__all__ = [
    'IStatsRepository',
]
