"""WebSocket endpoint through which observers receive task events."""

import orjson
import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from api.dependencies.auth import get_auth_provider
from api.v1.dependencies import get_notification_hub
from api.v1.schemas.notification import HubClientFrame
from domain.entities.hub import TaskEvents, is_user_group, user_group
from domain.services.notification_hub import NotificationHub
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.realtime.websocket_observer import WebSocketObserver

logger = structlog.get_logger()

router = APIRouter(prefix="/hubs", tags=["realtime"])


@router.websocket("/tasks")
async def task_hub(
    websocket: WebSocket,
    token: str | None = Query(None, description="Bearer token; joins the user's group"),
    hub: NotificationHub = Depends(get_notification_hub),
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> None:
    """
    Subscribe to task events.

    Every frame is JSON `{"event": ..., "args": [...]}`. Clients may send
    `{"action": "join" | "leave", "group": "..."}` to manage group membership.
    `user:{id}` groups can only be joined through the token of that user.
    Nothing is replayed on reconnect: re-read the task list after connecting.
    """
    await websocket.accept()
    connection_id = await hub.connect(WebSocketObserver(websocket))
    own_group: str | None = None

    if token:
        user = await auth_provider.validate_token(token)
        if user is None:
            await hub.send_to_connection(
                connection_id, TaskEvents.ERROR, "Invalid or expired token"
            )
        else:
            own_group = user_group(user.id)
            await hub.join_group(connection_id, own_group)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = HubClientFrame.model_validate(orjson.loads(raw))
            except (orjson.JSONDecodeError, ValidationError) as exc:
                logger.info("hub_frame_rejected", connection_id=connection_id, error=str(exc))
                await hub.send_to_connection(connection_id, TaskEvents.ERROR, "Invalid frame")
                continue

            if frame.action == "join":
                if is_user_group(frame.group) and frame.group != own_group:
                    logger.info(
                        "hub_join_refused", connection_id=connection_id, group=frame.group
                    )
                    await hub.send_to_connection(
                        connection_id, TaskEvents.ERROR, "Not allowed to join group"
                    )
                    continue
                await hub.join_group(connection_id, frame.group)
            else:
                await hub.leave_group(connection_id, frame.group)
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(connection_id)
