"""
Pydantic schemas for connection-request endpoints.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SendRequest(BaseModel):
    to_user_id: int = Field(..., ge=1, alias="toUserId")

    model_config = {"populate_by_name": True}


class PartyResponse(BaseModel):
    id: int
    name: str
    email: str
    username: str | None = None


class ConnectionResponse(BaseModel):
    id: int
    status: RequestStatus
    requester: PartyResponse
    recipient: PartyResponse
    created_at: datetime
    updated_at: datetime


class ConnectionList(BaseModel):
    connections: list[ConnectionResponse]
    count: int


class AcceptedConnection(BaseModel):
    id: int
    user: PartyResponse
    status: RequestStatus
    created_at: datetime


class AcceptedList(BaseModel):
    connections: list[AcceptedConnection]
    count: int


class ConnectionStatus(BaseModel):
    status: Literal["none", "sent", "received", "accepted"]
    connection: ConnectionResponse | None = None
