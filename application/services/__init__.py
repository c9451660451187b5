"""Application services root exports."""
from .aggregator import PlayerProjection, TeamPlayer, TeamProjection, player_projections, team_projections
from .credential_chain import CredentialChain, build_redirect_url
from .cursor_paginator import (
    compute_window, decode_cursor, encode_cursor, paginate, paginate_sequence,
)
from .skill_batch_loader import SkillBatchLoader

__all__ = [
    "PlayerProjection",
    "TeamPlayer",
    "TeamProjection",
    "player_projections",
    "team_projections",
    "CredentialChain",
    "build_redirect_url",
    "compute_window",
    "decode_cursor",
    "encode_cursor",
    "paginate",
    "paginate_sequence",
    "SkillBatchLoader",
]
