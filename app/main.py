from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.auth_route import auth_router
from app.api.v1.user_route import users_router
from app.core.config import settings
from app.core.firebase import close_firebase_identity_provider
from app.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events. Initializes database tables on
    startup and closes the identity provider HTTP client on shutdown.
    """
    # Startup: create tables
    await init_db()
    yield
    # Shutdown
    await close_firebase_identity_provider()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 instead of FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up the main application with CORS middleware, health checks,
    and routing for authentication and user endpoints.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Accounts API",
        description="User accounts backed by a managed identity provider",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware; credentials are required for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url] if settings.frontend_url else ["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(users_router, prefix="/users", tags=["users"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for load balancers and monitoring.

        Returns:
            dict: Health status response.
        """
        return {"status": "healthy"}

    # Root endpoint
    @app.get("/")
    async def root():
        """
        Root endpoint providing basic API information.

        Returns:
            dict: Welcome message.
        """
        return {"message": "Accounts API"}

    return app
