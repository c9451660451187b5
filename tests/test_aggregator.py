from application.services.aggregator import player_projections, team_projections
from conftest import match_stats
from domain.entities import SkillKey


def test_team_projections_keep_order_and_rosters():
    stats = match_stats("m1", humans=("1", "2"), bots=("b1",))

    teams = team_projections(stats)

    assert [t.team_id for t in teams] == [0, 1]
    assert [p.player_id for p in teams[0].players] == ["1", "2"]
    assert [p.player_id for p in teams[1].players] == ["bid(b1)"]
    assert teams[0].players[1].stats.kills == 11
    assert teams[0].stronghold.captures == 3
    assert teams[1].stronghold is None


def test_player_projections_mark_bots():
    stats = match_stats("m1", humans=("1",), bots=("b1",))

    human, bot = player_projections(stats)

    assert human.is_human is True
    assert human.player_id == "1"
    assert human.skill_key == SkillKey("1", "m1")
    assert bot.is_human is False
    assert bot.to_dict()["bot_attributes"] == {"Difficulty": 2}


def test_player_projection_flattens_participation():
    (human,) = player_projections(match_stats("m1", humans=("7",)))

    rendered = human.to_dict()

    assert rendered["match_id"] == "m1"
    assert rendered["present_at_completion"] is True
    assert rendered["rank"] == 1
