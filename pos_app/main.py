import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pos_app.api import categories, checkout, products, stats
from pos_app.config import Settings, settings as default_settings
from pos_app.database import create_db_engine, create_session_factory, init_db
from pos_app.exceptions import PosError

logger = logging.getLogger(__name__)


def _seed_names(settings: Settings) -> list[str]:
    return [n.strip() for n in settings.SEED_CATEGORIES.split(",") if n.strip()]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its own engine and session factory."""
    settings = settings or default_settings
    logging.getLogger("pos_app").setLevel(settings.LOG_LEVEL)

    engine = create_db_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine, _seed_names(settings))
        yield
        engine.dispose()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Catalog, checkout, stock history and sales statistics for POS terminals",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    @app.exception_handler(PosError)
    async def pos_error_handler(request: Request, exc: PosError):
        # Checkout failures are logged with their reason where they are rolled back
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Return JSON for unhandled exceptions so the terminal can parse the error."""
        logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.include_router(categories.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(checkout.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
