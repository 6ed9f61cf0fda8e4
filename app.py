import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from db import create_db_and_tables
from exceptions import MarketplaceException
from middleware.security_headers import SecurityHeadersMiddleware
from utils.error_handler import marketplace_exception_handler, unexpected_exception_handler
from web.api_router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info(f"[Startup] Marketplace API ready ({config.RUNTIME_ENVIRONMENT.value})")
    yield
    logging.warning('Shutting down..')


app = FastAPI(title="Marketplace", lifespan=lifespan)

if config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware)
    logging.info("[Startup] Security headers middleware enabled")
else:
    logging.debug("[Startup] Security headers middleware disabled")

if config.CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Accept-Language", "X-User-Id", "X-User-Role"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

app.add_exception_handler(MarketplaceException, marketplace_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container monitoring."""
    return {"status": "healthy"}
