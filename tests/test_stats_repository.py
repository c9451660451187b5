import httpx
import pytest

from domain.exceptions import UpstreamError
from infrastructure.api import HaloStatsClient
from infrastructure.api.halo_client import SPARTAN_HEADER
from infrastructure.repositories import StatsRepository


def _client(handler) -> HaloStatsClient:
    session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HaloStatsClient("spartan-xyz", session=session)


@pytest.mark.asyncio
async def test_match_history_request_and_parse():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "Start": 10, "Count": 2, "ResultCount": 2,
            "Results": [
                {"MatchId": "a", "MatchInfo": {"StartTime": "s", "EndTime": "e", "Duration": "d"},
                 "LastTeamId": 1, "Outcome": 2, "PresentAtEndOfMatch": True, "Rank": 3},
                {"MatchId": "b", "MatchInfo": {"StartTime": "s", "EndTime": "e", "Duration": "d"}},
            ],
        })

    async with _client(handler) as client:
        page = await StatsRepository(client).get_match_history("2533", 10, 11)

    request = seen[0]
    assert request.url.path == "/hi/players/xuid(2533)/matches"
    assert request.url.params["start"] == "10"
    assert request.url.params["count"] == "11"
    assert request.headers[SPARTAN_HEADER] == "spartan-xyz"
    assert [r.match_id for r in page.results] == ["a", "b"]
    assert page.results[0].to_dict()["id"] == "a"
    assert page.results[0].present_at_end_of_match is True


@pytest.mark.asyncio
async def test_match_stats_parse(stats_payload):
    async with _client(lambda request: httpx.Response(200, json=stats_payload)) as client:
        stats = await StatsRepository(client).get_match_stats("m-1")

    assert stats.match_id == "m-1"
    assert stats.match_info.map_variant.asset_id == "map-1"
    assert [t.team_id for t in stats.teams] == [0, 1]
    assert stats.teams[0].stats.zones_stats.captures == 4
    assert stats.teams[0].stats.core_stats.medals[0].total_personal_score_awarded == 100
    assert stats.teams[1].stats.zones_stats is None
    human, bot = stats.players
    assert human.bot_attributes is None
    assert human.stats_for_team(0).stats.core_stats.kda == 1.5
    assert bot.bot_attributes == {"Difficulty": 2}


@pytest.mark.asyncio
async def test_skill_request_and_parse(skill_row):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"Value": [skill_row("111"), skill_row("222", csr=900)]})

    async with _client(handler) as client:
        records = await StatsRepository(client).get_skill("m-1", ["111", "xuid(222)"])

    assert seen[0].url.path == "/hi/matches/m-1/skill"
    assert seen[0].url.params["players"] == "xuid(111),xuid(222)"
    first, second = records
    assert first.player_id == "111"
    assert first.pre_match_csr.value == 1450
    assert first.post_match_csr.value == 1462
    assert first.expected_kills == 13.2
    assert first.expected_deaths == 12.8
    assert first.tier_counterfactuals["gold"].kills == 10.0
    assert first.self_counterfactuals.deaths == 12.8
    assert second.csr_delta == 12


@pytest.mark.asyncio
async def test_skill_row_without_id(skill_row):
    async with _client(lambda request: httpx.Response(200, json={"Value": [skill_row(None)]})) as client:
        (record,) = await StatsRepository(client).get_skill("m-1", ["111"])

    assert record.player_id == ""


@pytest.mark.asyncio
async def test_profile_parse():
    payload = {"xuid": "2533", "gamertag": "Chief", "gamerpic": {"small": "s", "xlarge": "xl"}}

    async with _client(lambda request: httpx.Response(200, json=payload)) as client:
        player = await StatsRepository(client).get_player("Chief")

    assert player.to_dict() == {
        "id": "2533",
        "gamertag": "Chief",
        "pic": {"small": "s", "medium": "", "large": "", "xlarge": "xl"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 404, 500])
async def test_non_2xx_is_upstream_error(status):
    async with _client(lambda request: httpx.Response(status, json={})) as client:
        with pytest.raises(UpstreamError) as exc:
            await client.get_match_stats("m-1")

    assert exc.value.status_code == status
    assert exc.value.resource == "match_stats"


@pytest.mark.asyncio
async def test_non_json_body_is_upstream_error():
    async with _client(lambda request: httpx.Response(200, content=b"<html>")) as client:
        with pytest.raises(UpstreamError):
            await client.get_profile("Chief")


@pytest.mark.asyncio
async def test_transport_failure_is_upstream_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc:
            await client.get_matches("2533", 0, 25)

    assert exc.value.resource == "matches"


@pytest.mark.asyncio
async def test_invalid_url_is_upstream_error():
    def handler(request):
        raise httpx.InvalidURL("invalid host")

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc:
            await client.get_skill("m-1", ["111"])

    assert exc.value.resource == "skill"


@pytest.mark.asyncio
async def test_skill_without_value_list():
    async with _client(lambda request: httpx.Response(200, json={"Value": None})) as client:
        with pytest.raises(UpstreamError):
            await client.get_skill("m-1", ["111"])


@pytest.mark.asyncio
async def test_unexpected_shape_is_upstream_error():
    async with _client(lambda request: httpx.Response(200, json={"Teams": []})) as client:
        with pytest.raises(UpstreamError) as exc:
            await StatsRepository(client).get_match_stats("m-1")

    assert exc.value.resource == "match_stats"


@pytest.mark.asyncio
async def test_client_requires_context_manager():
    with pytest.raises(RuntimeError):
        await HaloStatsClient("token").get_profile("Chief")
