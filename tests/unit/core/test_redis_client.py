"""Unit tests for the Redis wrapper used by the blacklist and the e-mail queue."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from notevault.core.redis_client import RedisClient


class TestRedisEnqueue:
    async def test_disconnected_client_returns_false(self):
        assert await RedisClient().enqueue("queue:test", {"a": 1}) is False

    async def test_job_is_json_on_the_left(self):
        client = RedisClient()
        client.redis = MagicMock()
        client.redis.lpush = AsyncMock(return_value=1)

        assert await client.enqueue("queue:test", {"a": 1}) is True

        key, payload = client.redis.lpush.call_args.args
        assert key == "queue:test"
        assert json.loads(payload) == {"a": 1}

    async def test_redis_errors_propagate(self):
        client = RedisClient()
        client.redis = MagicMock()
        client.redis.lpush = AsyncMock(side_effect=ConnectionError("gone"))

        with pytest.raises(ConnectionError):
            await client.enqueue("queue:test", {})


class TestRedisBlacklist:
    async def test_blacklist_uses_ttl(self):
        client = RedisClient()
        client.redis = MagicMock()
        client.redis.setex = AsyncMock(return_value=True)
        client.redis.exists = AsyncMock(return_value=1)

        assert await client.add_to_blacklist("jti-1", 120) is True
        client.redis.setex.assert_awaited_once_with("blacklist:jti-1", 120, "blacklisted")
        assert await client.is_token_blacklisted("jti-1") is True

    async def test_disconnected_blacklist_is_noop(self):
        client = RedisClient()
        assert await client.add_to_blacklist("jti-1") is False
        assert await client.is_token_blacklisted("jti-1") is False
        assert await client.ping() is False
