"""
EcoLink - FastAPI Application Entry Point

Citizen reporting of environmental problems and a directory of RSE
organizations offering remediation services.

DESIGN PRINCIPLES:
- Firestore is the only source of truth; the API keeps no state between requests
- Creates never refresh cached lists; clients refetch
- Unknown enum values read from the store degrade to "unknown", never crash a view
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ecolink.config.firebase import initialize_firestore
from ecolink.core.errors import EcoLinkError
from ecolink.core.settings import settings
from ecolink.routes import auth, dashboard, health, map, onboarding, organizations, problems

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Environmental problem reporting and RSE organization directory",
    debug=settings.DEBUG
)


# Domain errors carry their own HTTP status
@app.exception_handler(EcoLinkError)
async def ecolink_exception_handler(request: Request, exc: EcoLinkError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last resort for anything a route did not translate."""
    logger.error(
        f"🔥 Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_errors(exc)
    logger.warning(f"⚠️ Rejected {request.method} {request.url.path}: {len(errors)} invalid field(s)")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors}
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances, which JSONResponse cannot encode
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection
    """
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        initialize_firestore()
    except Exception as e:
        print(f"Warning: Firestore initialization failed: {e}")
        print("   The app will start but database operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    print(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(problems.router)
app.include_router(organizations.router)
app.include_router(map.router)
app.include_router(onboarding.router)
app.include_router(dashboard.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "problems": "/problems",
        "organizations": "/organizations"
    }
