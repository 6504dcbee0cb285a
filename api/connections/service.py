"""
Connection-request business logic.

Per unordered pair {A, B} the state machine is:

    none -> pending(A->B) -> accepted
                 |
                 +-> rejected   (a rejected row counts as "none" and is
                                 re-opened by the next request)

Only the recipient can accept; either party can reject a pending request or
drop an accepted connection.
"""

from __future__ import annotations

import logging

import asyncpg

from auth import repository as account_repository
from core import errors
from core.db import Database

from . import repository, schemas
from .schemas import RequestStatus

logger = logging.getLogger(__name__)


def _party(row: dict, prefix: str) -> schemas.PartyResponse:
    return schemas.PartyResponse(
        id=int(row[f"{prefix}_id"]),
        name=str(row[f"{prefix}_name"]),
        email=str(row[f"{prefix}_email"]),
        username=row.get(f"{prefix}_username"),
    )


def to_connection_response(row: dict) -> schemas.ConnectionResponse:
    return schemas.ConnectionResponse(
        id=int(row["id"]),
        status=RequestStatus(row["status"]),
        requester=_party(row, "requester"),
        recipient=_party(row, "recipient"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def send_request(db: Database, *, user_id: int, to_user_id: int) -> schemas.ConnectionResponse:
    if user_id == to_user_id:
        raise errors.validation("You cannot send connection request to yourself")

    if not await account_repository.user_exists(db, to_user_id):
        raise errors.not_found("User not found")

    try:
        async with db.transaction() as tx:
            existing = await repository.get_request_between(tx, user_id, to_user_id, for_update=True)
            if existing is None:
                created = await repository.insert_request(tx, requester_id=user_id, recipient_id=to_user_id)
                request_id = int(created["id"])
            else:
                status = RequestStatus(existing["status"])
                if status is RequestStatus.ACCEPTED:
                    raise errors.conflict("You are already connected with this user")
                if status is RequestStatus.PENDING:
                    if int(existing["requester_id"]) == user_id:
                        raise errors.conflict("Connection request already sent")
                    raise errors.conflict("This user has already sent you a connection request")

                request_id = int(existing["id"])
                await repository.reopen_request(
                    tx,
                    request_id,
                    requester_id=user_id,
                    recipient_id=to_user_id,
                )
            row = await repository.get_request(tx, request_id)
    except asyncpg.UniqueViolationError as exc:
        # Both users sent a request at the same moment.
        raise errors.conflict("A connection request between these users already exists") from exc

    if row is None:
        raise RuntimeError("Connection request vanished after insert.")
    logger.info("connection_requested request_id=%s from=%s to=%s", request_id, user_id, to_user_id)
    return to_connection_response(row)


async def accept_request(db: Database, *, user_id: int, request_id: int) -> schemas.ConnectionResponse:
    async with db.transaction() as tx:
        row = await repository.get_request(tx, request_id, for_update=True)
        if row is None:
            raise errors.not_found("Connection request not found")
        if int(row["recipient_id"]) != user_id:
            raise errors.forbidden("You can only accept connection requests sent to you")

        status = RequestStatus(row["status"])
        if status is RequestStatus.ACCEPTED:
            raise errors.conflict("Connection request already accepted")
        if status is RequestStatus.REJECTED:
            raise errors.conflict("Connection request is no longer pending")

        await repository.set_status(tx, request_id, RequestStatus.ACCEPTED.value)
        updated = await repository.get_request(tx, request_id)

    if updated is None:
        raise RuntimeError("Connection request vanished after update.")
    logger.info("connection_accepted request_id=%s", request_id)
    return to_connection_response(updated)


async def reject_request(db: Database, *, user_id: int, request_id: int) -> str:
    """
    Reject a pending request or drop an accepted connection.
    Returns the client message describing what happened.
    """
    async with db.transaction() as tx:
        row = await repository.get_request(tx, request_id, for_update=True)
        if row is None:
            raise errors.not_found("Connection request not found")
        if user_id not in (int(row["requester_id"]), int(row["recipient_id"])):
            raise errors.forbidden("You can only reject your own connection requests")

        status = RequestStatus(row["status"])
        if status is RequestStatus.REJECTED:
            raise errors.conflict("Connection request already rejected")
        if status is RequestStatus.ACCEPTED:
            await repository.delete_request(tx, request_id)
            return "Connection removed successfully"

        await repository.set_status(tx, request_id, RequestStatus.REJECTED.value)
        return "Connection request rejected successfully"


async def pending_requests(db: Database, *, user_id: int) -> schemas.ConnectionList:
    rows = await repository.list_incoming(db, user_id, status=RequestStatus.PENDING.value)
    connections = [to_connection_response(row) for row in rows]
    return schemas.ConnectionList(connections=connections, count=len(connections))


async def sent_requests(db: Database, *, user_id: int) -> schemas.ConnectionList:
    rows = await repository.list_outgoing(db, user_id, status=RequestStatus.PENDING.value)
    connections = [to_connection_response(row) for row in rows]
    return schemas.ConnectionList(connections=connections, count=len(connections))


async def accepted_connections(db: Database, *, user_id: int) -> schemas.AcceptedList:
    rows = await repository.list_for_user(db, user_id, status=RequestStatus.ACCEPTED.value)
    connections = []
    for row in rows:
        other = "recipient" if int(row["requester_id"]) == user_id else "requester"
        connections.append(
            schemas.AcceptedConnection(
                id=int(row["id"]),
                user=_party(row, other),
                status=RequestStatus.ACCEPTED,
                created_at=row["created_at"],
            )
        )
    return schemas.AcceptedList(connections=connections, count=len(connections))


async def connection_status(db: Database, *, user_id: int, other_id: int) -> schemas.ConnectionStatus:
    if user_id == other_id:
        raise errors.validation("Cannot check connection status with yourself")

    row = await repository.get_request_between(db, user_id, other_id)
    if row is None or row["status"] == RequestStatus.REJECTED.value:
        return schemas.ConnectionStatus(status="none")

    if row["status"] == RequestStatus.ACCEPTED.value:
        status = "accepted"
    else:
        status = "sent" if int(row["requester_id"]) == user_id else "received"
    return schemas.ConnectionStatus(status=status, connection=to_connection_response(row))
