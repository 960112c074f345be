"""FastAPI backend for the word count service."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from wordcount.config import Settings
from wordcount.routes import router as words_router
from wordcount.store import WordCountStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr with a ``[words]`` prefix."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[words] %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


def create_app(settings: Optional[Settings] = None, store: Optional[WordCountStore] = None) -> FastAPI:
    """Build the application around one word store.

    The store is initialized in the lifespan hook, so requests are only
    served once the words table has been recreated. An initialization
    failure propagates and the server does not start.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        word_store = store or WordCountStore.from_url(
            settings.database_url,
            timeout=settings.database_timeout,
            echo=settings.database_echo,
        )
        await word_store.initialize()
        app.state.store = word_store
        logger.info("Server starting on port %s", settings.port)
        yield
        # Shutdown
        logger.info("Server shutting down")
        await word_store.close()

    app = FastAPI(title="Word Count API", lifespan=lifespan)
    app.include_router(words_router, prefix="/api", tags=["words"])
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
    )
