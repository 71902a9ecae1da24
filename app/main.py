# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the StellarWave API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload --port 3000
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.exceptions import (
    AppException,
    app_exception_handler,
    database_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.middleware import CorrelationIdMiddleware, MetricsMiddleware, TimeoutMiddleware
from app.routers import certificates, email, health, issuers, metrics, stellar, users
from app.auth import routes as auth_routes
from core.constants import API_PREFIX
from core.services.stellar_service import close_stellar_service, get_stellar_service
from lib.log_context import configure_logging
from lib.supabase_client import SupabaseClientError
from lib.sentry import init_sentry

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Initialize error tracking and the Stellar client
    - Shutdown: Close the Stellar HTTP client
    """
    # Startup
    logger.info(f"Starting StellarWave API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.allowed_origins_list}")
    init_sentry()
    get_stellar_service()

    yield

    # Shutdown
    logger.info("Shutting down StellarWave API")
    await close_stellar_service()


# Create FastAPI application
app = FastAPI(
    title="StellarWave API",
    description="""
## Certificate Issuance on Stellar

Issue, manage and verify certificates whose issuance can be anchored on the
Stellar blockchain.

### Roles

| Role | Can |
|------|-----|
| **admin** | Everything, including issuer management and deletions |
| **issuer** | Issue, edit and revoke certificates |
| **auditor** | Read certificates and issuers |
| **user** | Read certificates addressed to them |

### Quick Start

```bash
# 1. Register
curl -X POST http://localhost:3000/api/auth/register \\
  -H "Content-Type: application/json" \\
  -d '{"email": "ada@example.com", "password": "Str0ng!pass", "first_name": "Ada", "last_name": "Lovelace"}'

# 2. Verify a certificate (no auth needed)
curl http://localhost:3000/api/certificates/CERT-1A2B3C4D5E6F/verify
```
""",
    version=health.APP_VERSION,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    openapi_url=f"{API_PREFIX}/openapi.json",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Registration, login and current user"},
        {"name": "Users", "description": "User profiles"},
        {"name": "Issuers", "description": "Organisations allowed to issue certificates"},
        {"name": "Certificates", "description": "Issue, revoke and verify certificates"},
        {"name": "Stellar", "description": "Stellar network lookups"},
        {"name": "Email", "description": "Queue transactional emails"},
        {"name": "Health", "description": "API health and readiness checks"},
        {"name": "Metrics", "description": "Prometheus metrics"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================
# Added innermost first: correlation -> metrics -> timeout -> route

app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(MetricsMiddleware)
app.add_middleware(CorrelationIdMiddleware)

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID", "X-Request-ID"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(SupabaseClientError, database_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix=API_PREFIX,
)

# User endpoints
app.include_router(
    users.router,
    prefix=f"{API_PREFIX}/users",
    tags=["Users"]
)

# Issuer endpoints
app.include_router(
    issuers.router,
    prefix=f"{API_PREFIX}/issuers",
    tags=["Issuers"]
)

# Certificate endpoints
app.include_router(
    certificates.router,
    prefix=f"{API_PREFIX}/certificates",
    tags=["Certificates"]
)

# Stellar lookups
app.include_router(
    stellar.router,
    prefix=f"{API_PREFIX}/stellar",
    tags=["Stellar"]
)

# Email queue endpoints
app.include_router(
    email.router,
    prefix=f"{API_PREFIX}/email",
    tags=["Email"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix=f"{API_PREFIX}/health",
    tags=["Health"]
)

# Prometheus metrics
app.include_router(
    metrics.router,
    prefix=f"{API_PREFIX}/metrics",
    tags=["Metrics"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "StellarWave API",
        "version": health.APP_VERSION,
        "docs": f"{API_PREFIX}/docs",
        "health": f"{API_PREFIX}/health",
    }
