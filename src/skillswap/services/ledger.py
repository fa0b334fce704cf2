import logging

from skillswap.core.dto import MessageRequestDTO, BlockRecordDTO, RequestStatus, NotificationType
from skillswap.core.errors import Unauthorized, InvalidTransition, DuplicatePending, NotFound, InvalidPayload
from skillswap.core.interfaces import RequestInterface, DirectoryInterface
from .fanout import NotificationFanout

ACCEPT_GREETING = "Hi {name}! I accepted your message request. Let's connect!"


class RequestLedger:
    """
    Message requests: the consent handshake required before two users can
    exchange messages.

    A request is created pending by its sender. Only the recipient may accept,
    decline, block or hide it; only the sender may cancel it. Every transition
    is conditional on the request still being pending.
    """

    def __init__(
            self,
            request_gateway: RequestInterface,
            directory: DirectoryInterface,
            fanout: NotificationFanout,
            logger: logging.Logger,
            max_message_length: int = 500
    ):
        self._requests = request_gateway
        self._directory = directory
        self._fanout = fanout
        self.logger = logger
        self.max_message_length = max_message_length

    async def _get(self, request_id: int) -> MessageRequestDTO:
        request = await self._requests.get_request(request_id)
        if request is None:
            raise NotFound("Message request not found")
        return request

    async def _get_as_recipient(self, request_id: int, actor_id: str) -> MessageRequestDTO:
        request = await self._get(request_id)
        if request.to_user_id != actor_id:
            raise Unauthorized("Only the recipient can respond to this message request")
        if request.status != RequestStatus.PENDING:
            raise InvalidTransition(f"Message request is already {request.status.value}")
        return request

    async def send_request(self, from_user_id: str, to_user_id: str, text: str) -> MessageRequestDTO:
        message = (text or "").strip()
        if not message:
            raise InvalidPayload("Message request text must not be empty")
        if len(message) > self.max_message_length:
            raise InvalidPayload(f"Message request text is limited to {self.max_message_length} characters")

        if from_user_id == to_user_id:
            raise InvalidTransition("Cannot send a message request to yourself")

        recipient = await self._directory.get_user_by_id(to_user_id)
        if recipient is None:
            raise NotFound("Recipient user not found")
        sender = await self._directory.get_user_by_id(from_user_id)
        sender_name = sender.display_name if sender else "Unknown"

        if await self._requests.get_pending_request(from_user_id, to_user_id) is not None:
            raise DuplicatePending("You already have a pending message request to this user")

        request = await self._requests.create_request(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            from_user_name=sender_name,
            to_user_name=recipient.display_name,
            message=message
        )
        self.logger.info("Message request %s sent from %s to %s", request.id, from_user_id, to_user_id)

        await self._fanout.notify(
            user_id=to_user_id,
            notification_type=NotificationType.MESSAGE_REQUEST,
            title="New message request",
            message=f"{sender_name} wants to message you",
            data={
                "fromUserId": from_user_id,
                "fromUserName": sender_name,
                "requestMessage": message
            }
        )
        return request

    async def accept(self, request_id: int, actor_id: str) -> int:
        """
        Accept a pending request.

        Creates the conversation with zeroed counters and the greeting message
        from the recipient in the same transaction as the status change, then
        notifies the sender.

        Returns:
            id of the new conversation
        """
        request = await self._get_as_recipient(request_id, actor_id)

        conversation = await self._requests.accept_request(
            request,
            seed_content=ACCEPT_GREETING.format(name=request.from_user_name)
        )
        self.logger.info("Message request %s accepted, conversation %s created", request.id, conversation.id)

        await self._fanout.notify(
            user_id=request.from_user_id,
            notification_type=NotificationType.MESSAGE_ACCEPTED,
            title="Message request accepted!",
            message=f"{request.to_user_name} accepted your message request",
            data={"conversationId": conversation.id}
        )
        return conversation.id

    async def decline(self, request_id: int, actor_id: str) -> MessageRequestDTO:
        request = await self._get_as_recipient(request_id, actor_id)

        if not await self._requests.update_status(request.id, RequestStatus.DECLINED):
            raise InvalidTransition("Message request is no longer pending")
        self.logger.info("Message request %s declined", request.id)

        await self._fanout.notify(
            user_id=request.from_user_id,
            notification_type=NotificationType.MESSAGE_DECLINED,
            title="Message request declined",
            message=f"{request.to_user_name} declined your message request",
            data={"requestId": request.id}
        )
        return request.model_copy(update={"status": RequestStatus.DECLINED})

    async def block(self, request_id: int, actor_id: str) -> BlockRecordDTO:
        # Other requests from the same sender are not touched, and the block
        # record is not consulted when new requests are sent.
        request = await self._get_as_recipient(request_id, actor_id)

        block = await self._requests.block_request(request)
        self.logger.info("User %s blocked %s via request %s", actor_id, request.from_user_id, request.id)
        return block

    async def cancel(self, request_id: int, actor_id: str) -> None:
        request = await self._get(request_id)
        if request.from_user_id != actor_id:
            raise Unauthorized("Only the sender can cancel this message request")
        if request.status != RequestStatus.PENDING:
            raise InvalidTransition(f"Message request is already {request.status.value}")

        if not await self._requests.delete_request(request.id):
            raise InvalidTransition("Message request is no longer pending")
        self.logger.info("Message request %s cancelled", request.id)

    async def set_hidden(self, request_id: int, actor_id: str, hidden: bool) -> MessageRequestDTO:
        request = await self._get_as_recipient(request_id, actor_id)

        if not await self._requests.set_hidden(request.id, hidden):
            raise InvalidTransition("Message request is no longer pending")
        return request.model_copy(update={"is_hidden": hidden})

    async def incoming(self, user_id: str, hidden: bool = False) -> list[MessageRequestDTO]:
        return await self._requests.get_incoming_requests(user_id, hidden)

    async def outgoing(self, user_id: str) -> list[MessageRequestDTO]:
        return await self._requests.get_outgoing_requests(user_id)

    async def blocked(self, user_id: str) -> list[BlockRecordDTO]:
        return await self._requests.get_block_records(user_id)
