"""
Recipe Inbox HTTP server entry point

    python main.py            # or: recipe-inbox-server
"""
import logging
import multiprocessing

import uvicorn

from recipe_inbox.core.app import create_app
from recipe_inbox.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
app = create_app()


def resolve_workers(settings: Settings) -> int:
    """UVICORN_WORKERS, or 2 x cores + 1 when it is 0"""
    if settings.UVICORN_WORKERS > 0:
        return settings.UVICORN_WORKERS
    return (multiprocessing.cpu_count() * 2) + 1


def run() -> None:
    """Serve the API; DEBUG runs one reloading worker"""
    options = {
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL.lower(),
    }

    if settings.DEBUG:
        uvicorn.run("main:app", reload=True, **options)
        return

    workers = resolve_workers(settings)
    logger.info(f"Starting {settings.APP_NAME} on {settings.HOST}:{settings.PORT} with {workers} worker(s)")
    uvicorn.run("main:app", workers=workers, reload=False, **options)


if __name__ == "__main__":
    run()
