from fastapi import APIRouter, Depends, Query
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from ..models.notification_api_models import *
from ..fanout import NotificationFanout, BadgeCounter
from ..polling import long_poll
from .auth_api import AuthAPI


class NotificationAPI:
    """
    Notification inbox endpoints and the navigation badge counts.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for caller identification
        notification_router: FastAPI router containing notification endpoints
        polling_interval: Time between checks for new notifications during polling
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
            polling_interval: float = 3
    ):
        self.logger = logger
        self.auth_api = auth_api
        self._notification_router = APIRouter(prefix="/notifications", tags=["Notifications"])
        self._register_endpoints()
        self.polling_interval = polling_interval

    @property
    def notification_router(self) -> APIRouter:
        return self._notification_router

    def get_router(self) -> APIRouter:
        return self._notification_router

    def _register_endpoints(self):
        @self.notification_router.get("", response_model=list[NotificationResponse])
        @inject
        async def get_notifications(
                fanout: FromDishka[NotificationFanout],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            notifications = await fanout.list_for_user(user_id)
            return [NotificationResponse(**n.model_dump()) for n in notifications]

        @self.notification_router.get("/counts", response_model=BadgeCountsResponse)
        @inject
        async def get_counts(
                counter: FromDishka[BadgeCounter],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            """
            Badge total: unread notifications + conversations with unread
            messages + pending incoming requests.
            """
            user_id = await self.auth_api.get_current_user(token)
            return BadgeCountsResponse(**await counter.counts(user_id))

        @self.notification_router.get("/poll", response_model=NotificationPollingResponse)
        @inject
        async def poll_notifications(
                fanout: FromDishka[NotificationFanout],
                after_id: int = 0,
                timeout: float = Query(30, ge=0, le=60),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)

            notifications = await long_poll(
                lambda: fanout.list_after(user_id, after_id),
                timeout=timeout,
                interval=self.polling_interval
            )

            if notifications:
                return NotificationPollingResponse(
                    has_notifications=True,
                    notifications=[NotificationResponse(**n.model_dump()) for n in notifications],
                    last_notification_id=max(n.id for n in notifications)
                )

            return NotificationPollingResponse(has_notifications=False, last_notification_id=after_id)

        @self.notification_router.post("/read-all")
        @inject
        async def mark_all_read(
                fanout: FromDishka[NotificationFanout],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            updated = await fanout.mark_all_read(user_id)
            return {"status": "read", "updated": updated}

        @self.notification_router.post("/{notification_id}/read")
        @inject
        async def mark_read(
                notification_id: int,
                fanout: FromDishka[NotificationFanout],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            user_id = await self.auth_api.get_current_user(token)
            await fanout.mark_read(notification_id, user_id)
            return {"status": "read", "id": notification_id}
