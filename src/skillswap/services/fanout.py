import logging

from skillswap.core.dto import NotificationDTO, NotificationType
from skillswap.core.errors import NotFound, Unauthorized
from skillswap.core.interfaces import NotificationInterface, RequestInterface, ConversationInterface


class NotificationFanout:
    """
    Emits notifications to the counterpart of a committed transition and
    serves the recipient's notification inbox.

    `notify` is best effort: a failed write is logged and dropped so it can
    never undo the transition that triggered it.
    """

    def __init__(
            self,
            notification_gateway: NotificationInterface,
            logger: logging.Logger
    ):
        self._notifications = notification_gateway
        self.logger = logger

    async def notify(
            self,
            user_id: str,
            notification_type: NotificationType | str,
            title: str,
            message: str,
            data: dict | None = None
    ) -> NotificationDTO | None:
        if isinstance(notification_type, NotificationType):
            notification_type = notification_type.value
        try:
            return await self._notifications.create_notification(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                data=data or {}
            )
        except Exception as e:
            self.logger.warning("Dropping %s notification for user %s: %s", notification_type, user_id, e)
            return None

    async def list_for_user(self, user_id: str) -> list[NotificationDTO]:
        return await self._notifications.get_notifications(user_id)

    async def list_after(self, user_id: str, after_id: int) -> list[NotificationDTO]:
        return await self._notifications.get_notifications(user_id, after_id=after_id)

    async def mark_read(self, notification_id: int, actor_id: str) -> None:
        notification = await self._notifications.get_notification(notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        if notification.user_id != actor_id:
            raise Unauthorized("Only the recipient can mark a notification as read")
        await self._notifications.mark_as_read(notification_id)

    async def mark_all_read(self, user_id: str) -> int:
        return await self._notifications.mark_all_as_read(user_id)


class BadgeCounter:
    """ Aggregates the navigation badge: notifications + unread conversations + pending requests """

    def __init__(
            self,
            notification_gateway: NotificationInterface,
            conversation_gateway: ConversationInterface,
            request_gateway: RequestInterface
    ):
        self._notifications = notification_gateway
        self._conversations = conversation_gateway
        self._requests = request_gateway

    async def counts(self, user_id: str) -> dict[str, int]:
        notifications = await self._notifications.count_unread(user_id)
        messages = await self._conversations.count_unread_conversations(user_id)
        requests = await self._requests.count_pending_incoming(user_id)
        return {
            "notifications": notifications,
            "messages": messages,
            "requests": requests,
            "total": notifications + messages + requests
        }
