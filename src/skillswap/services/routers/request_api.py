from fastapi import APIRouter, status, Depends, Query
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from ..models.request_api_models import *
from ..ledger import RequestLedger
from ..views import filter_requests, REQUEST_SORTS
from .auth_api import AuthAPI

_SORT_PATTERN = "^(" + "|".join(REQUEST_SORTS) + ")$"


class RequestAPI:
    """
    Message request endpoints: the consent handshake before a conversation.

    Handles sending, listing (incoming/outgoing/blocked), and the recipient's
    and sender's transitions of a pending request.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for caller identification
        request_router: FastAPI router containing message request endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ):
        self.logger = logger
        self.auth_api = auth_api
        self._request_router = APIRouter(prefix="/message-requests", tags=["Message Requests"])
        self._register_endpoints()

    @property
    def request_router(self) -> APIRouter:
        return self._request_router

    def get_router(self) -> APIRouter:
        return self._request_router

    def _register_endpoints(self):
        @self.request_router.post("", status_code=status.HTTP_201_CREATED, response_model=MessageRequestResponse)
        @inject
        async def send_request(
                request_data: SendMessageRequest,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Send a message request to another user.

            Raises:
                409 if a pending request to the same user already exists
                404 if the recipient is unknown
            """
            user_id = await self.auth_api.get_current_user(token)
            request = await ledger.send_request(user_id, request_data.to_user_id, request_data.message)
            return MessageRequestResponse(**request.model_dump())

        @self.request_router.get("/incoming", response_model=list[MessageRequestResponse])
        @inject
        async def get_incoming_requests(
                ledger: FromDishka[RequestLedger],
                hidden: bool = False,
                search: str | None = None,
                sort: str = Query("newest", pattern=_SORT_PATTERN),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Pending requests addressed to the caller; `hidden` selects the
            hidden partition of the inbox.
            """
            user_id = await self.auth_api.get_current_user(token)
            requests = await ledger.incoming(user_id, hidden=hidden)
            return [MessageRequestResponse(**r.model_dump()) for r in filter_requests(requests, search, sort)]

        @self.request_router.get("/outgoing", response_model=list[MessageRequestResponse])
        @inject
        async def get_outgoing_requests(
                ledger: FromDishka[RequestLedger],
                search: str | None = None,
                sort: str = Query("newest", pattern=_SORT_PATTERN),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            requests = await ledger.outgoing(user_id)
            return [MessageRequestResponse(**r.model_dump()) for r in filter_requests(requests, search, sort)]

        @self.request_router.get("/blocked", response_model=list[BlockRecordResponse])
        @inject
        async def get_blocked_users(
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            return [BlockRecordResponse(**b.model_dump()) for b in await ledger.blocked(user_id)]

        @self.request_router.post("/{request_id}/accept", response_model=AcceptResponse)
        @inject
        async def accept_request(
                request_id: int,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Accept a pending request and open the conversation.

            Returns:
                AcceptResponse with the new conversation id
            """
            user_id = await self.auth_api.get_current_user(token)
            conversation_id = await ledger.accept(request_id, user_id)
            return AcceptResponse(conversation_id=conversation_id)

        @self.request_router.post("/{request_id}/decline", response_model=MessageRequestResponse)
        @inject
        async def decline_request(
                request_id: int,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            request = await ledger.decline(request_id, user_id)
            return MessageRequestResponse(**request.model_dump())

        @self.request_router.post("/{request_id}/block", response_model=BlockRecordResponse)
        @inject
        async def block_request(
                request_id: int,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Block the sender of a pending request.
            """
            user_id = await self.auth_api.get_current_user(token)
            block = await ledger.block(request_id, user_id)
            return BlockRecordResponse(**block.model_dump())

        @self.request_router.put("/{request_id}/hidden", response_model=MessageRequestResponse)
        @inject
        async def set_request_hidden(
                request_id: int,
                hidden_data: HiddenUpdateRequest,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            request = await ledger.set_hidden(request_id, user_id, hidden_data.hidden)
            return MessageRequestResponse(**request.model_dump())

        @self.request_router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
        @inject
        async def cancel_request(
                request_id: int,
                ledger: FromDishka[RequestLedger],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Withdraw the caller's own pending request.
            """
            user_id = await self.auth_api.get_current_user(token)
            await ledger.cancel(request_id, user_id)
