"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard.api import auth, profile, tasks
from taskboard.config import get_settings
from taskboard.data.direct import DirectConnector
from taskboard.data.errors import ConnectionFailureError, DataAccessError, UniqueConstraintError
from taskboard.database import Database

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    database = Database(settings.database_url)
    database.init_schema()
    app.state.database = database
    app.state.direct_connector = DirectConnector(
        settings.fallback_database_url, settings.default_database_name
    )
    logger.info(
        f"Started with direct fallback {'enabled' if settings.direct_fallback_enabled else 'disabled'}"
        f" (database: {app.state.direct_connector.database_name})"
    )
    yield
    database.dispose()


app = FastAPI(
    title="Task Management API",
    description="Per-user task lists with an ORM-first, driver-fallback data layer",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(profile.router)


@app.exception_handler(UniqueConstraintError)
async def unique_constraint_handler(request: Request, exc: UniqueConstraintError):
    """Duplicate resources are a client error."""
    logger.info(f"Rejected duplicate on {exc.operation}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Resource already exists"},
    )


@app.exception_handler(ConnectionFailureError)
async def connection_failure_handler(request: Request, exc: ConnectionFailureError):
    """The database is unreachable."""
    logger.error(f"Database connection failed during {exc.operation}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database connection failed"},
    )


@app.exception_handler(DataAccessError)
async def data_access_error_handler(request: Request, exc: DataAccessError):
    """Any other classified data-access failure."""
    logger.error(f"Data access error ({exc.kind}) during {exc.operation}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}


@app.get("/api/test-db")
async def test_database(request: Request):
    """Check database connectivity through the ORM."""
    try:
        user_count = request.app.state.database.count_users()
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": "Database connection failed",
                "error": str(e) if settings.is_development else None,
            },
        )
    return {
        "status": "connected",
        "message": "Database connection successful",
        "user_count": user_count,
    }


@app.get("/api")
async def api_info():
    """List the available endpoints."""
    return {
        "message": "Task Management API",
        "version": app.version,
        "endpoints": {
            "auth": {
                "register": "POST /api/auth/register",
                "login": "POST /api/auth/login",
                "me": "GET /api/auth/me",
            },
            "tasks": {
                "get_all": "GET /api/tasks",
                "create": "POST /api/tasks",
                "get": "GET /api/tasks/{task_id}",
                "update": "PUT /api/tasks/{task_id}",
                "delete": "DELETE /api/tasks/{task_id}",
            },
            "profile": {
                "get": "GET /api/profile",
                "update": "PUT /api/profile",
                "change_password": "POST /api/profile/change-password",
            },
        },
    }
