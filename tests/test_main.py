from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from chatwarden import main


def test_resolve_base_dir_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("CHATWARDEN_HOME", str(tmp_path))

    assert main.resolve_base_dir() == tmp_path.resolve()


def test_resolve_base_dir_source(monkeypatch):
    monkeypatch.delenv("CHATWARDEN_HOME", raising=False)

    assert main.resolve_base_dir() == main.Path(main.__file__).resolve().parents[2]


def test_missing_token_exits(monkeypatch):
    monkeypatch.setattr(main, "load_dotenv", lambda **_: None)
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)

    with pytest.raises(SystemExit):
        main.load_environment()


def test_token_is_returned(monkeypatch):
    monkeypatch.setattr(main, "load_dotenv", lambda **_: None)
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "secret")

    assert main.load_environment() == "secret"


def test_intents_include_message_content_and_members():
    intents = main.build_intents()

    assert intents.message_content is True
    assert intents.members is True
    assert intents.guilds is True


class DummyBot:
    def __init__(self, start_error=None) -> None:
        self.start = AsyncMock(side_effect=start_error)
        self.close = AsyncMock()

    def is_closed(self) -> bool:
        return False


@pytest.mark.asyncio
async def test_run_bot_closes_and_shuts_down_services():
    bot = DummyBot()
    services = SimpleNamespace(shutdown=AsyncMock())

    assert await main.run_bot(bot, services, "token") == 0

    bot.start.assert_awaited_once_with("token")
    bot.close.assert_awaited_once()
    services.shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_bot_reports_runtime_errors():
    bot = DummyBot(start_error=RuntimeError("gateway lost"))
    services = SimpleNamespace(shutdown=AsyncMock())

    assert await main.run_bot(bot, services, "token") == 1
    services.shutdown.assert_awaited_once()


def test_main_converts_system_exit(monkeypatch):
    def fake_run(coro):
        coro.close()
        raise SystemExit(1)

    monkeypatch.setattr(main.asyncio, "run", fake_run)

    assert main.main() == 1
