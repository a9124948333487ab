import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comment_board import __version__
from comment_board.cache import CacheManager
from comment_board.config import settings
from comment_board.database import Database
from comment_board.errors import CommentBoardError, InvalidParameter, StorageError
from comment_board.middleware import DiagnosticsMiddleware
from comment_board.routers import comments, metrics
from comment_board.schemas import ApiResponse, HealthResponse
from comment_board.services.comment_service import CommentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    database = Database.from_settings(settings)
    if settings.AUTO_CREATE_TABLES:
        await database.create_all()
    cache = CacheManager()
    if settings.CACHE_ENABLED:
        await cache.connect(settings.REDIS_URL)

    app.state.database = database
    app.state.cache = cache
    app.state.store = CommentStore(
        database.sessionmaker, cache=cache, detail_ttl=settings.CACHE_TTL_DETAIL
    )
    logger.info("Comment board started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await cache.disconnect()
    await database.dispose()


app = FastAPI(
    title="Comment Board API",
    description="Submit, list and delete short text comments",
    version=__version__,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(DiagnosticsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(comments.router)
app.include_router(metrics.router)


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------

def _error_response(exc: CommentBoardError) -> JSONResponse:
    body = ApiResponse(code=exc.status_code, msg=exc.message, data=None)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(CommentBoardError)
async def comment_board_error_handler(request: Request, exc: CommentBoardError):
    if isinstance(exc, StorageError):
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message,
            exc_info=exc.__cause__ or exc,
        )
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()))
        message = f"Invalid request data: {where}: {first.get('msg')}"
    else:
        message = "Invalid request data"
    return _error_response(InvalidParameter(message))


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()
