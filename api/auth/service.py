"""
Auth business logic.

Registration, login and the two OTP flows (email verification and password
reset). OTP expiries are stored as epoch milliseconds.
"""

from __future__ import annotations

import logging

import asyncpg

from core import config, errors, mail
from core.db import Database
from users import repository as profile_repository

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict, *, username: str) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        name=str(user_row["name"]),
        email=str(user_row["email"]),
        username=username,
        is_email_verified=bool(user_row["is_account_verified"]),
    )


def welcome_mail(email: str) -> dict[str, str]:
    name = config.app_name()
    return {
        "to": email,
        "subject": f"Welcome to {name}",
        "text": f"Welcome to {name}. Your account has been created with the email : {email}",
    }


async def register(db: Database, payload: schemas.RegisterRequest) -> schemas.AuthResult:
    name = payload.name.strip()
    email = repository.normalize_email(payload.email)
    username = payload.username.strip()
    if not name or not email or not payload.password or not username:
        raise errors.validation("Missing details")

    reason = security.username_error(username)
    if reason is not None:
        raise errors.validation(reason)

    if await repository.get_user_by_email(db, email) is not None:
        raise errors.conflict("User already exists")
    if await profile_repository.get_profile_by_username(db, username) is not None:
        raise errors.conflict("Username already exists")

    password_hash = security.hash_password(payload.password)
    try:
        async with db.transaction() as tx:
            user_row = await repository.create_user(tx, name=name, email=email, password_hash=password_hash)
            await profile_repository.create_profile(tx, user_id=int(user_row["id"]), username=username)
    except asyncpg.UniqueViolationError as exc:
        # Another registration claimed the email or username between the checks and the insert.
        if "username" in (exc.constraint_name or ""):
            raise errors.conflict("Username already exists") from exc
        raise errors.conflict("User already exists") from exc

    logger.info("user_registered user_id=%s", user_row["id"])
    return schemas.AuthResult(
        user=_to_user_response(user_row, username=username),
        token=security.build_session_token(user_id=int(user_row["id"])),
    )


async def login(db: Database, payload: schemas.LoginRequest) -> schemas.AuthResult:
    if not payload.email.strip() or not payload.password:
        raise errors.validation("Email and password are required")

    user_row = await repository.get_user_by_email(db, payload.email)
    if user_row is None:
        raise errors.not_found("User is not registered!")

    if not security.verify_password(payload.password, str(user_row.get("password") or "")):
        raise errors.unauthorized("Invalid password")

    profile = await profile_repository.get_profile_by_user_id(db, int(user_row["id"]))
    username = str(profile["username"]) if profile is not None else "unknown"
    return schemas.AuthResult(
        user=_to_user_response(user_row, username=username),
        token=security.build_session_token(user_id=int(user_row["id"])),
    )


async def send_verify_otp(db: Database, *, user_id: int) -> None:
    user_row = await repository.get_user_by_id(db, user_id)
    if user_row is None:
        raise errors.not_found("User not found")
    if bool(user_row["is_account_verified"]):
        raise errors.conflict("Account already verified")

    otp = security.generate_otp()
    expire_at = security.now_epoch_ms() + security.VERIFY_OTP_TTL_MS
    await repository.set_verify_otp(db, user_id, otp=otp, expire_at_ms=expire_at)

    await _deliver(
        to=str(user_row["email"]),
        subject="Account Verification OTP",
        text=f"Your OTP is {otp}. Verify your account using this otp.",
    )


async def verify_email(db: Database, *, user_id: int, otp: str) -> None:
    otp = (otp or "").strip()
    if not otp:
        raise errors.validation("Missing details")

    async with db.transaction() as tx:
        user_row = await repository.get_user_by_id(tx, user_id)
        if user_row is None:
            raise errors.not_found("User not found")

        stored = str(user_row.get("verify_otp") or "")
        if not stored or stored != otp:
            raise errors.validation("Invalid OTP")
        if int(user_row.get("verify_otp_expire_at") or 0) < security.now_epoch_ms():
            raise errors.validation("OTP Expired")

        await repository.mark_verified(tx, user_id)
    logger.info("email_verified user_id=%s", user_id)


async def send_reset_otp(db: Database, *, email: str) -> None:
    if not (email or "").strip():
        raise errors.validation("Email is required")

    user_row = await repository.get_user_by_email(db, email)
    if user_row is None:
        raise errors.not_found("User not found")

    otp = security.generate_otp()
    expire_at = security.now_epoch_ms() + security.RESET_OTP_TTL_MS
    await repository.set_reset_otp(db, int(user_row["id"]), otp=otp, expire_at_ms=expire_at)

    await _deliver(
        to=str(user_row["email"]),
        subject="Password reset OTP",
        text=f"Your OTP for resetting your password is {otp}. Reset your password using this otp.",
    )


async def reset_password(db: Database, payload: schemas.ResetPasswordRequest) -> None:
    otp = payload.otp.strip()
    if not payload.email.strip() or not otp or not payload.new_password:
        raise errors.validation("Email, OTP and new Password are required")

    async with db.transaction() as tx:
        user_row = await repository.get_user_by_email(tx, payload.email)
        if user_row is None:
            raise errors.not_found("User not found")

        stored = str(user_row.get("reset_otp") or "")
        if not stored or stored != otp:
            raise errors.validation("Invalid Otp")
        if int(user_row.get("reset_otp_expire_at") or 0) < security.now_epoch_ms():
            raise errors.validation("OTP expired")

        password_hash = security.hash_password(payload.new_password)
        await repository.update_password(tx, int(user_row["id"]), password_hash=password_hash)
    logger.info("password_reset user_id=%s", user_row["id"])


async def get_user_from_session_token(db: Database, token: str) -> dict:
    try:
        payload = security.decode_session_token(token)
    except security.AuthSecurityError as exc:
        raise errors.unauthorized(str(exc)) from exc

    subject = payload.get("id")
    if not isinstance(subject, int):
        raise errors.unauthorized("Not Authorized. Login again!")

    user_row = await repository.get_user_by_id(db, subject)
    if user_row is None:
        raise errors.unauthorized("Not Authorized. Login again!")
    return user_row


async def _deliver(*, to: str, subject: str, text: str) -> None:
    try:
        await mail.send_mail(to=to, subject=subject, text=text)
    except mail.MailError as exc:
        # The OTP is already stored; the client can simply ask again.
        raise errors.AppError(errors.ErrorKind.MAIL_DELIVERY, "Failed to send email. Try again later.") from exc
