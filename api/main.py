import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from comments import router as comments_router
from connections import router as connections_router
from core import config
from core.db import Database
from core.errors import AppError, ErrorKind, STATUS_BY_KIND
from core.log import configure_logging
from core.responses import Failure
from feed import router as feed_router
from follows import router as follows_router
from posts import router as posts_router
from users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # One pool per process, owned by the app and handed out via get_db.
    db = Database.from_env()
    await db.connect()
    app.state.db = db
    try:
        yield
    finally:
        await db.close()


app = FastAPI(lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser with cookies.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.client_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _failure(kind: ErrorKind, message: str) -> JSONResponse:
    body = Failure(error=kind, message=message)
    return JSONResponse(status_code=STATUS_BY_KIND[kind], content=body.model_dump(mode="json"))


@app.exception_handler(AppError)
async def handle_app_error(_: Request, exc: AppError) -> JSONResponse:
    return _failure(exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request."
    return _failure(ErrorKind.VALIDATION, message)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return _failure(ErrorKind.INTERNAL, "Internal server error.")


app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])
app.include_router(users_router.router, prefix="/api/user", tags=["user"])
app.include_router(posts_router.router, prefix="/api/posts", tags=["posts"])
app.include_router(comments_router.router, prefix="/api/comments", tags=["comments"])
app.include_router(follows_router.router, prefix="/api/follow", tags=["follow"])
app.include_router(connections_router.router, prefix="/api/connections", tags=["connections"])
app.include_router(feed_router.router, prefix="/api/feed", tags=["feed"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "API is working"}
