"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Response

from core import config, mail
from core.db import Database, get_db
from core.responses import Success

from . import dependencies, schemas, security, service

router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    secure = config.cookie_secure()
    response.set_cookie(
        key=security.SESSION_COOKIE_NAME,
        value=token,
        max_age=security.session_max_age_s(),
        httponly=True,
        secure=secure,
        samesite="none" if secure else "strict",
    )


@router.post("/register")
async def register(
    payload: schemas.RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
) -> Success[schemas.UserPayload]:
    result = await service.register(db, payload)
    _set_session_cookie(response, result.token)

    # Welcome mail goes out after the response; delivery is best-effort.
    background_tasks.add_task(mail.send_mail_quietly, **service.welcome_mail(result.user.email))

    return Success(message="User registered successfully", data=schemas.UserPayload(user=result.user))


@router.post("/login")
async def login(
    payload: schemas.LoginRequest,
    response: Response,
    db: Database = Depends(get_db),
) -> Success[schemas.UserPayload]:
    result = await service.login(db, payload)
    _set_session_cookie(response, result.token)
    return Success(message="User loggedIn successfully", data=schemas.UserPayload(user=result.user))


@router.post("/logout")
async def logout(response: Response) -> Success[None]:
    secure = config.cookie_secure()
    response.delete_cookie(
        key=security.SESSION_COOKIE_NAME,
        httponly=True,
        secure=secure,
        samesite="none" if secure else "strict",
    )
    return Success(message="user logged Out", data=None)


@router.get("/is-auth")
async def is_authenticated(
    _: dict = Depends(dependencies.get_current_user),
) -> Success[None]:
    return Success(message="Authenticated", data=None)


@router.post("/send-verify-otp")
async def send_verify_otp(
    current_user: dict = Depends(dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.send_verify_otp(db, user_id=int(current_user["id"]))
    return Success(message="Verification OTP sent on Email", data=None)


@router.post("/verify-email")
async def verify_email(
    payload: schemas.VerifyEmailRequest,
    current_user: dict = Depends(dependencies.get_current_user),
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.verify_email(db, user_id=int(current_user["id"]), otp=payload.otp)
    return Success(message="Account Verified Successfully", data=None)


@router.post("/send-reset-otp")
async def send_reset_otp(
    payload: schemas.SendResetOtpRequest,
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.send_reset_otp(db, email=payload.email)
    return Success(message="OTP sent on Email", data=None)


@router.post("/reset-password")
async def reset_password(
    payload: schemas.ResetPasswordRequest,
    db: Database = Depends(get_db),
) -> Success[None]:
    await service.reset_password(db, payload)
    return Success(message="Password has been reset successfully", data=None)
