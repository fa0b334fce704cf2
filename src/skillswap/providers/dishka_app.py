from typing import AsyncIterable
from dishka import Provider, Scope, provide
from redis import asyncio as aioredis
import logging

from skillswap.config import Config, load_config
from skillswap.core.db_manager import DatabaseManager
from skillswap.core.redis import RedisManager
from skillswap.core.gateways import (
    UserGateway, RequestGateway, ConversationGateway, MessageGateway, NotificationGateway, TypingGateway
)
from skillswap.core.interfaces import (
    DirectoryInterface, RequestInterface, ConversationInterface, MessageInterface, NotificationInterface, TypingInterface
)
from skillswap.services.fanout import NotificationFanout, BadgeCounter
from skillswap.services.ledger import RequestLedger
from skillswap.services.conversations import ConversationStore
from skillswap.services.stream import MessageStream
from skillswap.services.presence import TypingSignal
from skillswap.services.routers import AuthAPI, RequestAPI, ConversationAPI, MessageAPI, NotificationAPI

class AdaptersProvider(Provider):
    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return load_config(".env")

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("skillswap")

    @provide(scope=Scope.APP)
    async def get_redis(self, config: Config) -> AsyncIterable[aioredis.Redis]:
        client = RedisManager(host=config.redis.host, port=config.redis.port).get_redis()
        yield client
        await client.aclose()

    @provide(scope=Scope.APP)
    async def get_db_manager(self, config: Config) -> AsyncIterable[DatabaseManager]:
        db_manager = DatabaseManager(config)
        await db_manager.initialize()
        await db_manager.create_tables()
        yield db_manager
        await db_manager.close()

class GatewaysProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_directory(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> DirectoryInterface:
        return UserGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_request_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> RequestInterface:
        return RequestGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_conversation_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> ConversationInterface:
        return ConversationGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_message_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> MessageInterface:
        return MessageGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_notification_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> NotificationInterface:
        return NotificationGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_typing_gateway(
            self,
            redis: aioredis.Redis,
            config: Config,
            logger: logging.Logger
    ) -> TypingInterface:
        return TypingGateway(redis, config.messaging.typing_log_retention_seconds, logger)

class MessagingProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_fanout(
            self,
            notification_gateway: NotificationInterface,
            logger: logging.Logger
    ) -> NotificationFanout:
        return NotificationFanout(notification_gateway, logger)

    @provide(scope=Scope.REQUEST)
    def get_badge_counter(
            self,
            notification_gateway: NotificationInterface,
            conversation_gateway: ConversationInterface,
            request_gateway: RequestInterface
    ) -> BadgeCounter:
        return BadgeCounter(notification_gateway, conversation_gateway, request_gateway)

    @provide(scope=Scope.REQUEST)
    def get_ledger(
            self,
            request_gateway: RequestInterface,
            directory: DirectoryInterface,
            fanout: NotificationFanout,
            config: Config,
            logger: logging.Logger
    ) -> RequestLedger:
        return RequestLedger(
            request_gateway,
            directory,
            fanout,
            logger,
            max_message_length=config.messaging.request_message_max_length
        )

    @provide(scope=Scope.REQUEST)
    def get_conversation_store(
            self,
            conversation_gateway: ConversationInterface,
            message_gateway: MessageInterface,
            directory: DirectoryInterface,
            logger: logging.Logger
    ) -> ConversationStore:
        return ConversationStore(conversation_gateway, message_gateway, directory, logger)

    @provide(scope=Scope.REQUEST)
    def get_message_stream(
            self,
            message_gateway: MessageInterface,
            conversations: ConversationStore,
            directory: DirectoryInterface,
            fanout: NotificationFanout,
            logger: logging.Logger
    ) -> MessageStream:
        return MessageStream(message_gateway, conversations, directory, fanout, logger)

    @provide(scope=Scope.REQUEST)
    def get_typing_signal(
            self,
            typing_gateway: TypingInterface,
            conversations: ConversationStore,
            config: Config,
            logger: logging.Logger
    ) -> TypingSignal:
        return TypingSignal(typing_gateway, conversations, logger, ttl_ms=config.messaging.typing_ttl_ms)

class ServicesProvider(Provider):
    @provide(scope=Scope.APP)
    def get_auth_api(
        self,
        config: Config,
        redis: aioredis.Redis,
        logger: logging.Logger
    ) -> AuthAPI:
        return AuthAPI(
            secret_key=config.jwt.secret_key,
            redis=redis,
            logger=logger
        )

    @provide(scope=Scope.APP)
    def get_request_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> RequestAPI:
        return RequestAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_conversation_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> ConversationAPI:
        return ConversationAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_message_api(
            self,
            config: Config,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> MessageAPI:
        return MessageAPI(
            logger=logger,
            auth_api=auth_api,
            polling_interval=config.messaging.polling_interval
        )

    @provide(scope=Scope.APP)
    def get_notification_api(
            self,
            config: Config,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> NotificationAPI:
        return NotificationAPI(
            logger=logger,
            auth_api=auth_api,
            polling_interval=config.messaging.polling_interval
        )
