from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chatwarden.bot.discord_actions import DiscordAuditSink, DiscordChatActions, format_display_name


def make_guild(guild_id: int, owner_id: int = 0, member=None):
    guild = MagicMock()
    guild.id = guild_id
    guild.owner_id = owner_id
    guild.ban = AsyncMock()
    guild.get_member = MagicMock(return_value=member)
    guild.fetch_member = AsyncMock(return_value=member)
    return guild


def make_actions(guilds):
    bot = MagicMock()
    bot.get_guild = MagicMock(side_effect=lambda guild_id: guilds.get(guild_id))
    scheduler = MagicMock()
    return DiscordChatActions(bot, scheduler), bot, scheduler


def test_format_display_name_variants():
    assert format_display_name(SimpleNamespace(name="spammer", id=1)) == "@spammer"
    assert format_display_name(SimpleNamespace(name="", display_name="Jo Doe", id=7)) == "Jo Doe (ID: 7)"
    assert format_display_name(55) == "ID: 55"
    assert format_display_name(None) == "Unknown user"


def test_chat_registry_is_deduplicated_and_sorted():
    actions, _, _ = make_actions({})

    actions.register_chat(3)
    actions.register_chat(1)
    actions.register_chat(3)
    actions.forget_chat(2)

    assert actions.known_chat_ids() == [1, 3]

    actions.forget_chat(3)
    assert actions.known_chat_ids() == [1]


@pytest.mark.asyncio
async def test_ban_everywhere_reports_successful_chats():
    good_guild = make_guild(1)
    other_guild = make_guild(3)
    actions, _, _ = make_actions({1: good_guild, 3: other_guild})
    for chat_id in (1, 2, 3):
        actions.register_chat(chat_id)

    banned_in = await actions.ban_user_everywhere(42)

    assert banned_in == [1, 3]
    assert good_guild.ban.await_args.args[0].id == 42
    other_guild.ban.assert_awaited_once()


@pytest.mark.asyncio
async def test_ban_everywhere_without_chats_bans_nowhere():
    actions, _, _ = make_actions({})

    assert await actions.ban_user_everywhere(42) == []


@pytest.mark.asyncio
async def test_ban_user_in_unknown_chat_raises():
    actions, _, _ = make_actions({})

    with pytest.raises(LookupError):
        await actions.ban_user_in_chat(5, 42)


@pytest.mark.asyncio
async def test_is_admin_for_owner_and_administrator():
    admin = SimpleNamespace(guild_permissions=SimpleNamespace(administrator=True))
    member = SimpleNamespace(guild_permissions=SimpleNamespace(administrator=False))
    actions, _, _ = make_actions({1: make_guild(1, owner_id=9, member=admin), 2: make_guild(2, member=member)})

    assert await actions.is_admin(1, 9) is True
    assert await actions.is_admin(1, 5) is True
    assert await actions.is_admin(2, 5) is False
    assert await actions.is_admin(404, 5) is False


@pytest.mark.asyncio
async def test_is_admin_fetches_uncached_member_and_handles_not_found():
    class DummyNotFound(Exception):
        pass

    guild = make_guild(1)
    guild.fetch_member.side_effect = DummyNotFound("unknown member")
    actions, _, _ = make_actions({1: guild})

    with patch("chatwarden.bot.discord_actions.discord.NotFound", DummyNotFound):
        assert await actions.is_admin(1, 5) is False

    guild.fetch_member.assert_awaited_once_with(5)


@pytest.mark.asyncio
async def test_send_delete_and_schedule_delegate():
    actions, _, scheduler = make_actions({})
    channel = MagicMock()
    sent = MagicMock()
    channel.send = AsyncMock(return_value=sent)
    sent.delete = AsyncMock()

    assert await actions.send_message(channel, "hi") is sent
    await actions.delete_message(sent)
    actions.schedule_deletion(sent, 5)

    channel.send.assert_awaited_once_with("hi")
    sent.delete.assert_awaited_once()
    scheduler.schedule_nowait.assert_called_once_with(sent, 5)


@pytest.mark.asyncio
async def test_audit_sink_posts_to_admin_channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    bot = MagicMock()
    bot.get_channel = MagicMock(return_value=channel)

    await DiscordAuditSink(bot, 77).log_to_admin("banned someone")

    bot.get_channel.assert_called_once_with(77)
    channel.send.assert_awaited_once_with("banned someone")


@pytest.mark.asyncio
async def test_audit_sink_fetches_uncached_channel():
    channel = MagicMock()
    channel.send = AsyncMock()
    bot = MagicMock()
    bot.get_channel = MagicMock(return_value=None)
    bot.fetch_channel = AsyncMock(return_value=channel)

    await DiscordAuditSink(bot, 77).log_to_admin("text")

    bot.fetch_channel.assert_awaited_once_with(77)
    channel.send.assert_awaited_once_with("text")


@pytest.mark.asyncio
async def test_audit_sink_swallows_failures():
    channel = MagicMock()
    channel.send = AsyncMock(side_effect=RuntimeError("missing access"))
    bot = MagicMock()
    bot.get_channel = MagicMock(return_value=channel)

    await DiscordAuditSink(bot, 77).log_to_admin("text")

    channel.send.assert_awaited_once()


@pytest.mark.asyncio
async def test_audit_sink_without_channel_only_logs():
    bot = MagicMock()

    await DiscordAuditSink(bot, None).log_to_admin("text")

    bot.get_channel.assert_not_called()
