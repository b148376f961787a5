"""Pydantic schemas for the push notification endpoints and socket frames."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Free-form text pushed to observers."""

    model_config = ConfigDict(extra="forbid")

    message: str = Field(..., min_length=1, max_length=2000)


class DeliveryResult(BaseModel):
    """How many connections a message was queued for."""

    event: str
    recipients: int


class HubClientFrame(BaseModel):
    """Frame a socket client may send to manage its group memberships."""

    model_config = ConfigDict(extra="forbid")

    action: Literal["join", "leave"]
    group: str = Field(..., min_length=1, max_length=200)
