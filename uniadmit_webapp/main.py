from __future__ import annotations

import logging

from fastapi import FastAPI

try:
    from .config import APP_NAME, LOG_LEVEL
    from .db import init_db
    from .routes import router
except ImportError:
    from config import APP_NAME, LOG_LEVEL
    from db import init_db
    from routes import router


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


setup_logging(LOG_LEVEL)

app = FastAPI(title=APP_NAME)
app.include_router(router)

init_db()
