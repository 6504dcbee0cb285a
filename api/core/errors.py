"""
Application error taxonomy.

Services raise `AppError`; `main.py` renders it as the error envelope with a
status code derived from its kind. Messages are meant for clients, so they
must never carry raw driver or SMTP exception text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    MAIL_DELIVERY = "mail_delivery"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.MAIL_DELIVERY: 502,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


def validation(message: str) -> AppError:
    return AppError(ErrorKind.VALIDATION, message)


def unauthorized(message: str) -> AppError:
    return AppError(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str) -> AppError:
    return AppError(ErrorKind.FORBIDDEN, message)


def not_found(message: str) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message)


def conflict(message: str) -> AppError:
    return AppError(ErrorKind.CONFLICT, message)
