"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request

from story_shorts.api.dependencies import get_assembler
from story_shorts.api.routes import router
from story_shorts.config import get_output_dir, settings
from story_shorts.errors import EncoderLoadError, StoryShortsError

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# CORS configuration
# ---------------------------------------------------------------------------

_DEFAULT_ORIGINS = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
}


def _get_allowed_origins() -> set[str]:
    origins = set(_DEFAULT_ORIGINS)
    if settings.allowed_origins:
        origins.update(o.strip() for o in settings.allowed_origins.split(",") if o.strip())
    return origins


_ALLOWED_ORIGINS = _get_allowed_origins()


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the encoder before serving; a failed load leaves the API up in a not-ready state."""
    logger.info("app.startup", allowed_origins=sorted(_ALLOWED_ORIGINS))

    assembler = get_assembler()
    try:
        await assembler.encoder.load()
    except EncoderLoadError:
        logger.exception("app.encoder.unavailable")

    yield

    logger.info("app.shutdown")


app = FastAPI(
    title="Story Shorts",
    description="Storyboard-to-video generator for vertical social clips",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_ALLOWED_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping: every failure leaves as {"error": ..., "details"?: ...}
# ---------------------------------------------------------------------------


@app.exception_handler(StoryShortsError)
async def handle_story_shorts_error(request: Request, exc: StoryShortsError):
    if exc.status_code >= 500:
        logger.error("api.error", path=request.url.path, error=exc.message, kind=type(exc).__name__)
    else:
        logger.info("api.rejected", path=request.url.path, error=exc.message, kind=type(exc).__name__)

    body = {"error": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "error": f"{location}: {message}" if location else message,
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")} for error in errors
            ],
        },
    )


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


app.include_router(router)

# Rendered videos are served for preview
app.mount("/files/output", StaticFiles(directory=str(get_output_dir())), name="output")


@app.get("/health")
async def health_check():
    return {"status": "ok"}
