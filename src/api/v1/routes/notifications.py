"""Push notification routes: free-form messages through the hub."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_notification_hub
from api.v1.schemas.common import ApiResponse
from api.v1.schemas.notification import DeliveryResult, MessageCreate
from core.rate_limit import WRITE_LIMIT, limiter
from domain.entities.hub import TaskEvents, user_group
from domain.services.notification_hub import NotificationHub

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post(
    "/broadcast",
    response_model=ApiResponse[DeliveryResult],
    summary="Broadcast a message to every observer",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def broadcast_message(
    request: Request,
    body: MessageCreate,
    user: CurrentUser,
    hub: NotificationHub = Depends(get_notification_hub),
) -> ApiResponse[DeliveryResult]:
    """Connected observers receive `receiveMessage(message)`."""
    recipients = await hub.broadcast_all(TaskEvents.RECEIVE_MESSAGE, body.message)
    return ApiResponse(
        message="Message broadcast",
        data=DeliveryResult(event=TaskEvents.RECEIVE_MESSAGE, recipients=recipients),
    )


@router.post(
    "/users/{user_id}",
    response_model=ApiResponse[DeliveryResult],
    summary="Notify one user",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def notify_user(
    request: Request,
    user_id: int,
    body: MessageCreate,
    user: CurrentUser,
    hub: NotificationHub = Depends(get_notification_hub),
) -> ApiResponse[DeliveryResult]:
    """Every connection of the user receives `receiveNotification(message)`.

    A user with no open connection simply gets nothing; there is no inbox.
    """
    recipients = await hub.broadcast_to_group(
        user_group(user_id), TaskEvents.RECEIVE_NOTIFICATION, body.message
    )
    return ApiResponse(
        message="Notification sent",
        data=DeliveryResult(event=TaskEvents.RECEIVE_NOTIFICATION, recipients=recipients),
    )
