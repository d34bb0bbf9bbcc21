import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .api.config import router as config_router
from .api.feature_flags import router as feature_flags_router
from .api.health import router as health_router
from .api.projects import router as projects_router
from .api.prometheus import router as prometheus_router
from .api.prompts import router as prompts_router
from .api.version import router as version_router
from .config import (
    API_PREFIX, API_VERSION, APP_PORT, AUTO_CREATE_SCHEMA, CORS_ORIGINS, DATABASE_URL, ENVIRONMENT, MANAGEMENT_PREFIX
)
from .db import init_db
from .errors import register_exception_handlers
from .logging_config import setup_logging
from .middleware import TracingMiddleware

# Configure logging at import time
setup_logging()

logger = logging.getLogger("flagdeck")


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("Flagdeck API starting up", extra={"component": "api", "version": API_VERSION, "environment": ENVIRONMENT})

    if AUTO_CREATE_SCHEMA:
        init_db()
    logger.info("DB_CHECK: url=%s auto_create=%s", DATABASE_URL.split("@")[-1], AUTO_CREATE_SCHEMA)

    logger.info("Flagdeck API ready", extra={"component": "api"})
    try:
        yield
    finally:
        logger.info("Flagdeck API shutting down", extra={"component": "api"})


app = FastAPI(title="Flagdeck API", version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add tracing middleware
app.add_middleware(TracingMiddleware)


class ApiVersionHeaderMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-API-Version"] = "v1"
        return response


app.add_middleware(ApiVersionHeaderMiddleware)

register_exception_handlers(app)

# Runtime API, authenticated with project API keys
app.include_router(health_router, prefix=API_PREFIX)
app.include_router(version_router, prefix=API_PREFIX)
app.include_router(config_router, prefix=API_PREFIX)
app.include_router(feature_flags_router, prefix=API_PREFIX)
app.include_router(prompts_router, prefix=API_PREFIX)
app.include_router(prometheus_router, prefix=API_PREFIX)

# Management API, authenticated with admin tokens
app.include_router(projects_router, prefix=MANAGEMENT_PREFIX)


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Flagdeck API on port %s", APP_PORT)
    uvicorn.run("flagdeck.main:app", host="0.0.0.0", port=APP_PORT, reload=False, access_log=True)
