import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Optional

import yaml
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import DocumentStore, connect
from errors import ApiError, AppError
from responses import failure, not_found
from routes_auth import router as auth_router
from routes_music import router as music_router
from settings import Settings

logger = logging.getLogger(__name__)


def init_logger(config_path: str) -> logging.Logger:
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
        logger.debug("Logger configured")
    except Exception as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Logger initialization failed: {e}")
    return logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    init_logger(settings.LOG_CONFIG)
    app.state.store.ensure_indexes()
    logger.info(f"Connected to MongoDB database {app.state.store.db.name}")
    yield
    logger.info("Application shutdown")


def register_error_handlers(app: FastAPI):
    def production() -> bool:
        return app.state.settings.is_production

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"{exc.message}: {exc.cause!r}", exc_info=exc.cause)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(failure(exc.message, exc.detail(), production())),
        )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(failure(str(exc), exc.detail(), production())),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=500,
            content=jsonable_encoder(failure("Invalid request", exc.errors(), production())),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            path = request.url.path
            if request.url.query:
                path = f"{path}?{request.url.query}"
            return JSONResponse(status_code=404, content=not_found(path))
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(failure(str(exc.detail), exc.detail, production())),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error")
        return JSONResponse(
            status_code=500,
            content=failure("Something went wrong!", str(exc), production()),
        )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings()
    if database is None:
        database = connect(settings)

    app = FastAPI(
        title="Music Catalog API",
        description="Songs, albums, playlists, podcasts and favourites.",
        version="1.0.0",
        docs_url="/api-docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = DocumentStore(database)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(auth_router, prefix="/api")
    app.include_router(music_router, prefix="/api")

    @app.get("/")
    def read_root():
        return {"message": "Music Catalog API running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.PORT)
