"""
Test configuration and fixtures for the messaging service tests.
"""

import logging
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from dishka import Provider, Scope, make_async_container, provide

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from redis import asyncio as aioredis

from skillswap.config import Config, JWTConfig, DBConfig, RedisConfig, MessagingConfig
from skillswap.core.db_manager import DatabaseManager
from skillswap.core.dto import UserDTO
from skillswap.core.gateways import (
    UserGateway, RequestGateway, ConversationGateway, MessageGateway, NotificationGateway, TypingGateway
)
from skillswap.main import create_app
from skillswap.providers.dishka_app import GatewaysProvider, MessagingProvider, ServicesProvider
from skillswap.services.conversations import ConversationStore
from skillswap.services.fanout import NotificationFanout, BadgeCounter
from skillswap.services.ledger import RequestLedger
from skillswap.services.presence import TypingSignal
from skillswap.services.routers.auth_api import AuthAPI
from skillswap.services.stream import MessageStream


# In-memory stand-in for the Redis commands the typing signal uses
class MockRedis:
    def __init__(self):
        self.sorted_sets = {}
        self.ttls = {}

    async def ping(self):
        return True

    async def zadd(self, key, mapping):
        zset = self.sorted_sets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update(mapping)
        return added

    async def expire(self, key, seconds):
        if key not in self.sorted_sets:
            return False
        self.ttls[key] = seconds
        return True

    @staticmethod
    def _bound(value):
        value = str(value)
        if value == "+inf":
            return float("inf"), False
        if value == "-inf":
            return float("-inf"), False
        if value.startswith("("):
            return float(value[1:]), True
        return float(value), False

    async def zrangebyscore(self, key, min_score, max_score):
        low, low_exclusive = self._bound(min_score)
        high, high_exclusive = self._bound(max_score)
        members = sorted(self.sorted_sets.get(key, {}).items(), key=lambda item: item[1])
        return [
            member for member, score in members
            if (score > low if low_exclusive else score >= low)
            and (score < high if high_exclusive else score <= high)
        ]

    async def zcard(self, key):
        return len(self.sorted_sets.get(key, {}))


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        jwt=JWTConfig(secret_key="test-secret"),
        db=DBConfig(path=str(tmp_path / "messaging.db")),
        redis=RedisConfig(),
        messaging=MessagingConfig(polling_interval=0.05),
    )


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("skillswap.tests")


@pytest.fixture
def mock_redis() -> MockRedis:
    return MockRedis()


@pytest_asyncio.fixture
async def db_manager(config):
    manager = DatabaseManager(config)
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.close()


# Gateways

@pytest.fixture
def directory(db_manager, logger):
    return UserGateway(db_manager, logger)


@pytest.fixture
def request_gateway(db_manager, logger):
    return RequestGateway(db_manager, logger)


@pytest.fixture
def conversation_gateway(db_manager, logger):
    return ConversationGateway(db_manager, logger)


@pytest.fixture
def message_gateway(db_manager, logger):
    return MessageGateway(db_manager, logger)


@pytest.fixture
def notification_gateway(db_manager, logger):
    return NotificationGateway(db_manager, logger)


@pytest.fixture
def typing_gateway(mock_redis, logger):
    return TypingGateway(mock_redis, retention_seconds=60, logger=logger)


# Services

@pytest.fixture
def fanout(notification_gateway, logger):
    return NotificationFanout(notification_gateway, logger)


@pytest.fixture
def ledger(request_gateway, directory, fanout, logger):
    return RequestLedger(request_gateway, directory, fanout, logger)


@pytest.fixture
def store(conversation_gateway, message_gateway, directory, logger):
    return ConversationStore(conversation_gateway, message_gateway, directory, logger)


@pytest.fixture
def stream(message_gateway, store, directory, fanout, logger):
    return MessageStream(message_gateway, store, directory, fanout, logger)


@pytest.fixture
def signal(typing_gateway, store, logger):
    return TypingSignal(typing_gateway, store, logger, ttl_ms=3000)


@pytest.fixture
def badge_counter(notification_gateway, conversation_gateway, request_gateway):
    return BadgeCounter(notification_gateway, conversation_gateway, request_gateway)


@pytest_asyncio.fixture
async def users(directory):
    """Seed the directory with three students."""
    profiles = [
        UserDTO(id="alice", name="Alice", email="alice@uni.edu", rating=4.5, is_online=True),
        UserDTO(id="bob", name="Bob", email="bob@uni.edu", rating=3.0),
        UserDTO(id="carol", name="", email="carol@uni.edu"),
    ]
    for profile in profiles:
        await directory.upsert_user(profile)
    return {profile.id: profile for profile in profiles}


@pytest_asyncio.fixture
async def conversation_id(ledger, users):
    """A conversation between alice and bob, opened by bob accepting alice's request."""
    request = await ledger.send_request("alice", "bob", "hi")
    return await ledger.accept(request.id, "bob")


# HTTP

class InMemoryAdaptersProvider(Provider):
    def __init__(self, config: Config, db_manager: DatabaseManager, redis_client: MockRedis):
        super().__init__()
        self._config = config
        self._db_manager = db_manager
        self._redis = redis_client

    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return self._config

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("skillswap.tests")

    @provide(scope=Scope.APP)
    def get_redis(self) -> aioredis.Redis:
        return self._redis

    @provide(scope=Scope.APP)
    def get_db_manager(self) -> DatabaseManager:
        return self._db_manager


@pytest.fixture
def auth_api(config, mock_redis, logger):
    return AuthAPI(secret_key=config.jwt.secret_key, redis=mock_redis, logger=logger)


@pytest.fixture
def auth_headers(auth_api):
    def make(user_id: str) -> dict:
        return {"Authorization": f"Bearer {auth_api.create_access_token(user_id)}"}
    return make


@pytest_asyncio.fixture
async def client(config, db_manager, mock_redis):
    container = make_async_container(
        InMemoryAdaptersProvider(config, db_manager, mock_redis),
        GatewaysProvider(),
        MessagingProvider(),
        ServicesProvider(),
    )
    app = await create_app(container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    await container.close()
