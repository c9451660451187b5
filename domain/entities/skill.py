"""Skill (CSR / performance) entities."""
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional


def bare_xuid(player_id: str) -> str:
    """``xuid(2535...)`` -> ``2535...``; other ids pass through unchanged."""
    if player_id.startswith('xuid(') and player_id.endswith(')'):
        return player_id[5:-1]
    return player_id


@dataclass(frozen=True)
class SkillKey:
    """Identity of one batched skill lookup."""

    player_id: str
    match_id: str

    @classmethod
    def for_player(cls, player_id: str, match_id: str) -> 'SkillKey':
        return cls(player_id=bare_xuid(player_id), match_id=match_id)


@dataclass
class Csr:
    """Competitive skill rank snapshot."""

    value: int = 0
    measurement_matches_remaining: int = 0
    tier: str = ""
    tier_start: int = 0
    sub_tier: int = 0
    next_tier: str = ""
    next_tier_start: int = 0
    next_sub_tier: int = 0
    initial_measurement_matches: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StatPerformance:
    count: int
    expected: float
    std_dev: float


@dataclass
class KillsDeaths:
    kills: float = 0.0
    deaths: float = 0.0


@dataclass
class SkillRecord:
    """Skill result of one player in one match."""

    player_id: str
    result_code: int = 0
    team_id: int = 0
    team_mmr: float = 0.0
    pre_match_csr: Csr = field(default_factory=Csr)
    post_match_csr: Csr = field(default_factory=Csr)
    kills: Optional[StatPerformance] = None
    deaths: Optional[StatPerformance] = None
    team_mmrs: Dict[str, float] = field(default_factory=dict)
    self_counterfactuals: Optional[KillsDeaths] = None
    tier_counterfactuals: Dict[str, KillsDeaths] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """ResultCode 0 means the skill service computed a result."""
        return self.result_code == 0

    @property
    def expected_kills(self) -> Optional[float]:
        return self.kills.expected if self.kills else None

    @property
    def expected_deaths(self) -> Optional[float]:
        return self.deaths.expected if self.deaths else None

    @property
    def csr_delta(self) -> int:
        return self.post_match_csr.value - self.pre_match_csr.value
