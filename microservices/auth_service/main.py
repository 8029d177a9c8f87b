"""
Authentication Microservice

Identity provider for shiptrack: username/password login issuing JWT
session tokens, token verification and internal identity lookups.

Port: 8201
"""

import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from core.auth_dependencies import (
    AuthenticatedUser,
    get_current_user,
    require_internal_service,
)
from core.config_manager import ConfigManager
from core.logger import setup_service_logger

from .auth_service import AuthService
from .factory import create_auth_service, create_jwt_manager
from .models import (
    LoginRequest,
    LoginResponse,
    TokenVerificationRequest,
    TokenVerificationResponse,
    UserIdentity,
)
from .protocols import (
    AuthenticationError,
    AuthServiceError,
    LoginValidationError,
    UserNotFoundError,
)
from .routes_registry import SERVICE_METADATA

# Initialize configuration
config_manager = ConfigManager("auth_service")
config = config_manager.get_service_config()

# Setup loggers
logger = setup_service_logger(
    "auth_service",
    level=config.log_level,
    log_format=config.log_format,
    log_file=config.log_file,
)

jwt_manager = create_jwt_manager(config)


class AuthMicroservice:
    """Authentication microservice core"""

    def __init__(self):
        self.auth_service: Optional[AuthService] = None

    async def initialize(self):
        """Open storage and seed the configured administrator"""
        logger.info("Initializing authentication microservice...")
        self.auth_service = create_auth_service(config, jwt_manager=jwt_manager)
        try:
            await self.auth_service.repo.initialize()
            await self.auth_service.ensure_admin(config.admin_username, config.admin_password)
        except Exception as e:
            logger.error(f"Failed to initialize authentication microservice: {e}", exc_info=True)
            raise
        logger.info("Authentication microservice initialized successfully")

    async def shutdown(self):
        """Close storage"""
        if self.auth_service:
            await self.auth_service.repo.close()
        logger.info("Authentication microservice shutdown completed")


# Global service instance
auth_microservice = AuthMicroservice()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    await auth_microservice.initialize()
    logger.info(f"Auth Service started on port {config.service_port}")

    yield

    await auth_microservice.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Authentication Microservice",
    description="Identity provider - login, JWT verification, identity lookup",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)

app.state.jwt_manager = jwt_manager
app.state.internal_service_secret = config.internal_service_secret


# Dependency Injection

def get_auth_service() -> AuthService:
    if auth_microservice.auth_service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return auth_microservice.auth_service


# Health Check Endpoints

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    service = auth_microservice.auth_service
    db_connected = service is not None and await service.check_connection()
    health = {
        "status": "healthy" if db_connected else "unhealthy",
        "service": SERVICE_METADATA["service_name"],
        "port": config.service_port,
        "version": SERVICE_METADATA["version"],
        "database": "connected" if db_connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(content=health, status_code=200 if db_connected else 503)


# Login

@app.post("/api/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Username/password login

    Returns a bearer token and the user's public identity. Failures use a
    single generic message.
    """
    try:
        result = await auth_service.authenticate(request.username, request.password)
    except LoginValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": str(e)},
        )
    except AuthenticationError as e:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "message": str(e)},
        )

    return LoginResponse(
        success=True,
        token=result.token,
        user=result.user,
        message="Login successful",
    )


# Token Endpoints

@app.get("/api/v1/auth/me", response_model=UserIdentity)
async def get_me(
    user: AuthenticatedUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Identity of the bearer token's owner"""
    try:
        return await auth_service.resolve(user.user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/api/v1/auth/verify", response_model=TokenVerificationResponse)
async def verify_token(
    request: TokenVerificationRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Verify a token"""
    try:
        identity = await auth_service.verify(request.token)
    except AuthenticationError as e:
        return TokenVerificationResponse(valid=False, error=str(e))

    expires_at = auth_service.jwt_manager.verify_token(request.token).get("expires_at")
    return TokenVerificationResponse(valid=True, user=identity, expires_at=expires_at)


# Internal Identity Lookup

@app.get("/api/v1/auth/users/{user_id}", response_model=UserIdentity)
async def get_user_identity(
    user_id: str,
    caller: str = Depends(require_internal_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Resolve a user id to its public identity (internal services only)"""
    try:
        return await auth_service.resolve(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# Error Handlers

@app.exception_handler(AuthServiceError)
async def auth_service_error_handler(request: Request, exc: AuthServiceError):
    logger.error(f"Auth service error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception in {request.url}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    config_manager.print_config_summary()

    uvicorn.run(
        "microservices.auth_service.main:app",
        host=config.service_host,
        port=config.service_port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )
