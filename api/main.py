import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from auth import security as auth_security
from contact import router as contact_router
from core import db, log, settings
from core.errors import AppError
from projects import router as projects_router

log.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    # Unknown-username logins compare against this; build it before the first request.
    auth_security.dummy_password_hash()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title=settings.app_name(), lifespan=lifespan)

# Only the portfolio frontends may call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(projects_router.router, tags=["projects"])
app.include_router(projects_router.admin_router, tags=["projects"])
app.include_router(auth_router.router, tags=["auth"])
app.include_router(contact_router.router, tags=["contact"])


def _message(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc.__class__.__name__,
            exc_info=exc,
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _message(exc.status_code, exc.message, headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _message(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _message(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "Invalid request.")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_failed method=%s path=%s error=%s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
        exc_info=exc,
    )
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "portfolio api"}
