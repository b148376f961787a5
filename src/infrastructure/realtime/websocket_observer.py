"""Observer that pushes hub messages over a WebSocket."""

import orjson
from starlette import status
from starlette.websockets import WebSocket

from domain.entities.hub import HubMessage


def encode_message(message: HubMessage) -> str:
    """Serialize a message to the JSON text frame clients receive.

    Task views are dataclasses, so orjson encodes them (with their enums
    and datetimes) without a custom default.
    """
    return orjson.dumps(message.to_wire()).decode()


class WebSocketObserver:
    """Delivery handle wrapping one accepted WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, message: HubMessage) -> None:
        await self._websocket.send_text(encode_message(message))

    async def close(self) -> None:
        """Close the socket after the hub gave up on it; the client must resubscribe."""
        await self._websocket.close(
            code=status.WS_1011_INTERNAL_ERROR, reason="Delivery stopped, reconnect"
        )
