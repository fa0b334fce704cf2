"""
Test the typing signal: an indicator is visible to the other participant for
three seconds after it was announced.
"""
from datetime import datetime, timedelta, timezone

import pytest

from skillswap.core.errors import Unauthorized

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


async def test_indicator_visible_within_window(signal, conversation_id):
    await signal.announce_typing(conversation_id, "alice", "Alice", now=NOW)

    typers = await signal.active_typers(conversation_id, "bob", now=NOW + timedelta(milliseconds=2999))

    assert [t.user_id for t in typers] == ["alice"]
    assert typers[0].user_name == "Alice"
    assert typers[0].timestamp == NOW


async def test_indicator_expires_after_window(signal, conversation_id):
    await signal.announce_typing(conversation_id, "alice", "Alice", now=NOW)

    assert await signal.active_typers(conversation_id, "bob", now=NOW + timedelta(milliseconds=3000)) == []
    assert await signal.active_typers(conversation_id, "bob", now=NOW + timedelta(seconds=10)) == []


async def test_window_is_exact_below_a_millisecond(signal, conversation_id):
    """Visibility follows the exact age, not the millisecond score."""
    announced = NOW + timedelta(microseconds=400)
    await signal.announce_typing(conversation_id, "alice", "Alice", now=announced)

    just_inside = announced + timedelta(milliseconds=2999, microseconds=900)
    typers = await signal.active_typers(conversation_id, "bob", now=just_inside)
    assert [t.timestamp for t in typers] == [announced]

    just_outside = announced + timedelta(milliseconds=3000, microseconds=100)
    assert await signal.active_typers(conversation_id, "bob", now=just_outside) == []


async def test_own_indicator_not_shown(signal, conversation_id):
    await signal.announce_typing(conversation_id, "alice", "Alice", now=NOW)

    assert await signal.active_typers(conversation_id, "alice", now=NOW + timedelta(seconds=1)) == []


async def test_announcements_append_and_latest_wins(signal, mock_redis, conversation_id):
    await signal.announce_typing(conversation_id, "alice", "Alice", now=NOW)
    await signal.announce_typing(conversation_id, "alice", "Alice", now=NOW + timedelta(seconds=2))

    assert await mock_redis.zcard(f"typing:{conversation_id}") == 2

    typers = await signal.active_typers(conversation_id, "bob", now=NOW + timedelta(milliseconds=2500))
    assert len(typers) == 1
    assert typers[0].timestamp == NOW + timedelta(seconds=2)


async def test_log_key_expires(signal, mock_redis, conversation_id):
    await signal.announce_typing(conversation_id, "bob", "Bob", now=NOW)

    assert mock_redis.ttls[f"typing:{conversation_id}"] == 60


async def test_typing_requires_participation(signal, conversation_id):
    with pytest.raises(Unauthorized):
        await signal.announce_typing(conversation_id, "carol", "Carol", now=NOW)
    with pytest.raises(Unauthorized):
        await signal.active_typers(conversation_id, "carol", now=NOW)
