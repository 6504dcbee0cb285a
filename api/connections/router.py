"""
Connection-request API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import Database, get_db
from core.responses import Success

from . import schemas, service

router = APIRouter()


@router.post("/send-request")
async def send_request(
    payload: schemas.SendRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ConnectionResponse]:
    data = await service.send_request(db, user_id=int(current_user["id"]), to_user_id=payload.to_user_id)
    return Success(message="Connection request sent successfully", data=data)


@router.put("/accept/{connection_id}")
async def accept_request(
    connection_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ConnectionResponse]:
    data = await service.accept_request(db, user_id=int(current_user["id"]), request_id=connection_id)
    return Success(message="Connection request accepted successfully", data=data)


@router.delete("/reject/{connection_id}")
async def reject_request(
    connection_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    message = await service.reject_request(db, user_id=int(current_user["id"]), request_id=connection_id)
    return Success(message=message, data=None)


@router.get("/pending")
async def pending_requests(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ConnectionList]:
    data = await service.pending_requests(db, user_id=int(current_user["id"]))
    return Success(message="Pending connection requests retrieved", data=data)


@router.get("/sent")
async def sent_requests(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ConnectionList]:
    data = await service.sent_requests(db, user_id=int(current_user["id"]))
    return Success(message="Sent connection requests retrieved", data=data)


@router.get("/accepted")
async def accepted_connections(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.AcceptedList]:
    data = await service.accepted_connections(db, user_id=int(current_user["id"]))
    return Success(message="Connections retrieved", data=data)


@router.get("/status/{user_id}")
async def connection_status(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[schemas.ConnectionStatus]:
    data = await service.connection_status(db, user_id=int(current_user["id"]), other_id=user_id)
    message = "No connection exists" if data.status == "none" else "Connection status retrieved"
    return Success(message=message, data=data)
