# shoplens/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from shoplens.db import mongo, redis as r
from shoplens.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is required: both endpoints read from it
    await mongo.connect()

    # Redis is optional (report cache only)
    await r.connect()

    logger.info("%s started env=%s", settings.APP_NAME, settings.APP_ENV)
    yield

    # --- Shutdown ---
    try:
        await r.disconnect()
    except Exception as e:
        logger.warning("Redis disconnect failed: %s", e)

    await mongo.disconnect()
    logger.info("%s stopped", settings.APP_NAME)
