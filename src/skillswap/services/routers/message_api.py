from fastapi import APIRouter, status, Depends, Query
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from skillswap.core.interfaces import DirectoryInterface
from ..models.message_api_models import *
from ..stream import MessageStream
from ..presence import TypingSignal
from ..polling import long_poll
from .auth_api import AuthAPI


class MessageAPI:
    """
    Message endpoints: sending, history, long polling, edit, delete,
    read receipts and typing indicators.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for caller identification
        message_router: FastAPI router containing message endpoints
        polling_interval: Time between checks for new messages during polling
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
            polling_interval: float = 3
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._message_router = APIRouter(tags=["Messages"])
        self._register_endpoints()

        self.polling_interval = polling_interval  # seconds

    @property
    def message_router(self) -> APIRouter:
        return self._message_router

    def get_router(self) -> APIRouter:
        return self._message_router

    def _register_endpoints(self):
        @self.message_router.post(
            "/conversations/{conversation_id}/messages",
            status_code=status.HTTP_201_CREATED,
            response_model=MessageResponse
        )
        @inject
        async def send_message(
                conversation_id: int,
                message_data: MessageSendRequest,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Send a message to the other participant of a conversation.
            """
            sender_id = await self.auth_api.get_current_user(token)
            message = await stream.send(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=message_data.content,
                message_type=message_data.type
            )
            return MessageResponse(**message.model_dump())

        @self.message_router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
        @inject
        async def get_conversation_history(
                conversation_id: int,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            All messages of the conversation in creation order, deleted ones included.
            """
            user_id = await self.auth_api.get_current_user(token)
            history = await stream.list_messages(conversation_id, user_id)
            return [MessageResponse(**msg.model_dump()) for msg in history]

        @self.message_router.get("/conversations/{conversation_id}/messages/poll", response_model=PollingResponse)
        @inject
        async def poll_messages(
                conversation_id: int,
                stream: FromDishka[MessageStream],
                after_id: int = 0,
                timeout: float = Query(30, ge=0, le=60), # seconds
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Poll for new messages using long-polling technique.

            Returns at once when messages newer than `after_id` exist, otherwise
            waits for them up to `timeout` seconds.
            """
            user_id = await self.auth_api.get_current_user(token)

            messages = await long_poll(
                lambda: stream.list_after(conversation_id, user_id, after_id),
                timeout=timeout,
                interval=self.polling_interval
            )

            if messages:
                return PollingResponse(
                    has_messages=True,
                    messages=[MessageResponse(**msg.model_dump()) for msg in messages],
                    last_message_id=max(m.id for m in messages)
                )

            return PollingResponse(has_messages=False, last_message_id=after_id)

        @self.message_router.get("/messages/{message_id}", response_model=MessageResponse)
        @inject
        async def get_message(
                message_id: int,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            message = await stream.read(message_id, user_id)
            return MessageResponse(**message.model_dump())

        @self.message_router.patch("/messages/{message_id}", response_model=MessageResponse)
        @inject
        async def edit_message(
                message_id: int,
                edit_data: MessageEditRequest,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            message = await stream.edit(message_id, user_id, edit_data.content)
            return MessageResponse(**message.model_dump())

        @self.message_router.delete("/messages/{message_id}", response_model=MessageResponse)
        @inject
        async def delete_message(
                message_id: int,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Replace the message with a tombstone; it keeps its place in the history.
            """
            user_id = await self.auth_api.get_current_user(token)
            message = await stream.soft_delete(message_id, user_id)
            return MessageResponse(**message.model_dump())

        @self.message_router.post("/messages/{message_id}/read", response_model=MessageResponse)
        @inject
        async def mark_message_read(
                message_id: int,
                stream: FromDishka[MessageStream],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            message = await stream.mark_read(message_id, user_id)
            return MessageResponse(**message.model_dump())

        @self.message_router.post(
            "/conversations/{conversation_id}/typing",
            status_code=status.HTTP_201_CREATED,
            response_model=TypingIndicatorResponse
        )
        @inject
        async def announce_typing(
                conversation_id: int,
                typing_data: TypingAnnounceRequest,
                signal: FromDishka[TypingSignal],
                directory: FromDishka[DirectoryInterface],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)

            user_name = typing_data.user_name
            if not user_name:
                user = await directory.get_user_by_id(user_id)
                user_name = user.display_name if user else "Unknown"

            indicator = await signal.announce_typing(conversation_id, user_id, user_name)
            return TypingIndicatorResponse(**indicator.model_dump())

        @self.message_router.get(
            "/conversations/{conversation_id}/typing",
            response_model=list[TypingIndicatorResponse]
        )
        @inject
        async def get_typing(
                conversation_id: int,
                signal: FromDishka[TypingSignal],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Other participants who announced typing within the last few seconds.
            """
            user_id = await self.auth_api.get_current_user(token)
            indicators = await signal.active_typers(conversation_id, user_id)
            return [TypingIndicatorResponse(**i.model_dump()) for i in indicators]
