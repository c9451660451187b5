import json

import httpx
import pytest

import main
from presentation.cli import PlayerCommand, TokenCommand
from config import Settings


@pytest.fixture(autouse=True)
def no_log_files(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_CONSOLE", "false")
    monkeypatch.setattr(main.settings, "LOG_DIR", tmp_path)


def test_token_without_configuration_exits_2(monkeypatch, capsys):
    for key in Settings.AUTH_KEYS:
        monkeypatch.setattr(main.settings, key, "")

    code = main.main(["token", "--code", "abc"])

    assert code == 2
    assert "AUTH_CLIENT_ID" in json.loads(capsys.readouterr().err)["missing"]


def test_token_requires_exactly_one_grant():
    with pytest.raises(SystemExit):
        main.main(["token"])


def test_player_query_arguments():
    parser = main._build_parser()
    args = parser.parse_args(["player", "Chief", "--token", "t", "--first", "3", "--teams", "--skill"])

    query = PlayerCommand.build_query(args)

    assert query.gamertag == "Chief"
    assert query.matches.first == 3
    assert query.teams is not None
    assert query.players is not None
    assert query.skill is True


@pytest.mark.asyncio
async def test_player_command_prints_json(monkeypatch, capsys):
    profile = {"xuid": "2533", "gamertag": "Chief", "gamerpic": {}}

    def handler(request):
        if "/users/" in request.url.path:
            return httpx.Response(200, json=profile)
        return httpx.Response(200, json={"Results": []})

    session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    args = main._build_parser().parse_args(["player", "Chief", "--token", "t", "--first", "2"])

    code = await PlayerCommand(session=session).run(args)
    await session.aclose()

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["data"]["player"]["gamertag"] == "Chief"
    assert out["data"]["player"]["matches"]["edges"] == []


@pytest.mark.asyncio
async def test_token_command_reports_failed_step(auth_config, capsys):
    session = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(400, json={})))
    command = TokenCommand(auth_config, session=session)
    args = main._build_parser().parse_args(["token", "--refresh-token", "expired"])

    code = await command.run(args)
    await session.aclose()

    assert code == 1
    assert json.loads(capsys.readouterr().out)["step"] == "grant"
