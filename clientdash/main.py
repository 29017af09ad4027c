from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clientdash.api.endpoints import users, clients
from clientdash.core.config import settings, is_debug_mode
from clientdash.core.logging import capture_error, init_sentry, setup_logging
from clientdash.db.session import init_models
from clientdash.middleware.logging import AccessLoggingMiddleware

DEFAULT_ERROR_MESSAGE = "An error occurred"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


app = FastAPI(
    title="Client Dashboard API",
    description="""
## Authentication

1. Register with `POST /users/registerUser` or log in with `POST /users/loginUser`.
2. Copy the `token` from the response.
3. Send it as `Authorization: Bearer <token>` on `/users/getProfile`,
   `/users/logoutUser` and every `/clients` endpoint.

Every error response has the shape `{"message": "..."}`.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AccessLoggingMiddleware, enabled=settings.MODE != "test")


# ==================== Error responses ====================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else DEFAULT_ERROR_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


def _format_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        field = ".".join(loc)
        msg = error.get("msg", "Invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": _format_validation_errors(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    capture_error(exc, context={"request": {"method": request.method, "path": request.url.path}})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(clients.router, prefix="/clients", tags=["clients"])


@app.get("/")
def root():
    return {"message": "Client Dashboard API", "debug": is_debug_mode()}


@app.get("/health")
def health():
    return {"status": "ok"}
