import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shoplens.api.v1.routers.health import router as health_router
from shoplens.api.v1.routers.reports import router as reports_router
from shoplens.api.v1.routers.search import router as search_router
from shoplens.core.config import get_settings
from shoplens.core.errors import InvalidPrecondition
from shoplens.core.lifespan import lifespan
from shoplens.core.logging import configure_logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://admin.example.com"
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=False,                        # required with "*"
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# ------- Errors -------
@app.exception_handler(InvalidPrecondition)
async def invalid_precondition_handler(request: Request, exc: InvalidPrecondition):
    logger.warning("Invalid precondition on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ------- Routes -------
app.include_router(health_router)
app.include_router(search_router)      # /products/search
app.include_router(reports_router)     # /reports/top-products
