from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from formstudio.api import forms, health, themes
from formstudio.core.config import settings
from formstudio.core.logging import api_logger, configure_logging
from formstudio.core.middleware import (
    RequestContextMiddleware,
    http_exception_handler,
    validation_exception_handler,
)
from formstudio.db.database import create_tables, dispose_engine

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await create_tables()
    api_logger.info("Database tables ready", env=settings.APP_ENV)
    yield
    # Shutdown
    await dispose_engine()


app = FastAPI(
    title="formstudio API",
    description="Form builder backend: documents, themes, publishing and submissions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Include routers
app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])
app.include_router(themes.router, prefix="/api/themes", tags=["Themes"])

# Health / readiness endpoints
app.include_router(health.router, prefix="", tags=["Health"])
