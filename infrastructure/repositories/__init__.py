"""Infrastructure repositories module."""
from .stats_repository import StatsRepository

__all__ = [
    'StatsRepository',
]
