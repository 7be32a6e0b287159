import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from classroom_api.classroom.router import router as classroom_router
from classroom_api.config import Settings, settings
from classroom_api.db import UserStore
from classroom_api.errors import ClassroomAPIError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def handle_api_error(request: Request, exc: ClassroomAPIError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Malformed bodies are client errors: 400 with the same {"error": ...} shape
    errors = exc.errors()
    if errors:
        first = errors[0]
        # A body that is not JSON at all has no meaningful field location
        location = "" if first.get("type") == "json_invalid" else ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the API bound to one settings object.

    The bearer secret and database path are read from ``app_settings`` at
    request time via ``app.state``, so several apps with different secrets
    can coexist in one process.
    """
    app_settings = app_settings or settings
    store = UserStore(app_settings.database_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.init_db()
        if not app_settings.tpa_api_bearer_token:
            logger.error("TPA_API_BEARER_TOKEN is not configured; classroom routes will answer 500")
        logger.info("Classroom API started")
        yield

    app = FastAPI(title="Classroom API", version="0.1.0", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.store = store

    app.add_exception_handler(ClassroomAPIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(classroom_router)
    return app


app = create_app()
