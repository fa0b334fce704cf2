from fastapi import APIRouter, Depends, Query
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from ..models.conversation_api_models import *
from ..conversations import ConversationStore
from ..views import filter_conversations, CONVERSATION_SORTS
from .auth_api import AuthAPI

_SORT_PATTERN = "^(" + "|".join(CONVERSATION_SORTS) + ")$"


class ConversationAPI:
    """
    Conversation endpoints: listing, opening, pinning and theming.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for caller identification
        conversation_router: FastAPI router containing conversation endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ):
        self.logger = logger
        self.auth_api = auth_api
        self._conversation_router = APIRouter(prefix="/conversations", tags=["Conversations"])
        self._register_endpoints()

    @property
    def conversation_router(self) -> APIRouter:
        return self._conversation_router

    def get_router(self) -> APIRouter:
        return self._conversation_router

    def _register_endpoints(self):
        @self.conversation_router.get("", response_model=list[ConversationResponse])
        @inject
        async def get_conversations(
                store: FromDishka[ConversationStore],
                search: str | None = None,
                sort: str = Query("recent", pattern=_SORT_PATTERN),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            List the caller's conversations, most recent activity first unless
            another sort is requested.
            """
            user_id = await self.auth_api.get_current_user(token)
            conversations = await store.list_for_user(user_id)
            return [
                ConversationResponse(**c.model_dump())
                for c in filter_conversations(conversations, search, sort)
            ]

        @self.conversation_router.get("/{conversation_id}", response_model=ConversationResponse)
        @inject
        async def get_conversation(
                conversation_id: int,
                store: FromDishka[ConversationStore],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            conversation = await store.get_for_user(conversation_id, user_id)
            return ConversationResponse(**conversation.model_dump())

        @self.conversation_router.post("/{conversation_id}/open", response_model=OpenResponse)
        @inject
        async def open_conversation(
                conversation_id: int,
                store: FromDishka[ConversationStore],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Called when the caller opens the conversation: clears their unread
            counter and marks the messages addressed to them as read.
            """
            user_id = await self.auth_api.get_current_user(token)
            marked = await store.open(conversation_id, user_id)
            return OpenResponse(conversation_id=conversation_id, marked_read=marked)

        @self.conversation_router.post("/{conversation_id}/pin", response_model=PinResponse)
        @inject
        async def toggle_pin(
                conversation_id: int,
                store: FromDishka[ConversationStore],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            pinned = await store.toggle_pin(conversation_id, user_id)
            return PinResponse(conversation_id=conversation_id, is_pinned=pinned)

        @self.conversation_router.put("/{conversation_id}/theme")
        @inject
        async def set_theme(
                conversation_id: int,
                theme_data: ThemeUpdateRequest,
                store: FromDishka[ConversationStore],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            await store.set_theme(conversation_id, user_id, theme_data.theme)
            return {"conversation_id": conversation_id, "theme": theme_data.theme}
