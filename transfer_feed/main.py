import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from transfer_feed import __version__
from transfer_feed.api import create_api_router
from transfer_feed.core.config import get_settings
from transfer_feed.infrastructure.database.session import dispose_engine, init_db
from transfer_feed.streaming import feed_gateway

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    feed_gateway.close_all()
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.project_name,
        description="Live transfer feed over Server-Sent Events",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    logger.info("Starting %s on %s:%s", settings.project_name, settings.host, settings.port)
    uvicorn.run("transfer_feed.main:app", host=settings.host, port=settings.port, reload=settings.server.reload)


if __name__ == "__main__":
    run()
