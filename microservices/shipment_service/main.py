"""
Shipment Microservice

Shipment lifecycle and tracking service.
Admin shipment management, audited status updates, statistics and the
public tracking-number lookup.

Port: 8230
"""

import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from core.auth_dependencies import AuthenticatedUser, require_admin
from core.config_manager import ConfigManager
from core.jwt_manager import JWTManager
from core.logger import setup_service_logger

from .clients import AuthClient
from .factory import create_shipment_service
from .models import (
    DeleteShipmentResponse,
    ServiceInfo,
    Shipment,
    ShipmentCreateRequest,
    ShipmentListResponse,
    ShipmentStats,
    ShipmentStatus,
    ShipmentUpdateRequest,
    StatusUpdateRequest,
)
from .protocols import (
    DuplicateTrackingNumberError,
    GenerationExhaustedError,
    InvalidStatusTransitionError,
    ShipmentNotFoundError,
    ShipmentServiceError,
    ShipmentValidationError,
)
from .routes_registry import SERVICE_METADATA, get_routes_summary
from .shipment_service import ShipmentService

# Initialize configuration
config_manager = ConfigManager("shipment_service")
service_config = config_manager.get_service_config()

# Setup loggers
logger = setup_service_logger(
    "shipment_service",
    level=service_config.log_level,
    log_format=service_config.log_format,
    log_file=service_config.log_file,
)

# Global service instances
shipment_service: Optional[ShipmentService] = None
auth_client: Optional[AuthClient] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global shipment_service, auth_client

    logger.info("Starting Shipment Service...")

    auth_client = AuthClient(
        base_url=service_config.auth_service_url,
        internal_secret=service_config.internal_service_secret,
    )
    shipment_service = create_shipment_service(service_config, identity_client=auth_client)

    try:
        await shipment_service.repo.initialize()
    except Exception as e:
        logger.error(f"Failed to initialize shipment store: {e}", exc_info=True)
        await auth_client.close()
        raise RuntimeError("Database connection failed") from e

    logger.info(f"Shipment Service started on port {service_config.service_port}")

    yield

    # Cleanup
    try:
        await auth_client.close()
    except Exception as e:
        logger.error(f"Error closing auth client: {e}")

    try:
        await shipment_service.repo.close()
    except Exception as e:
        logger.error(f"Error closing shipment store: {e}")

    logger.info("Shipment Service stopped")


# Initialize FastAPI app
app = FastAPI(
    title="Shipment Service",
    description="Shipment lifecycle and tracking",
    version=SERVICE_METADATA["version"],
    lifespan=lifespan,
)

app.state.jwt_manager = JWTManager(
    secret_key=service_config.jwt_secret,
    algorithm=service_config.jwt_algorithm,
    issuer=service_config.jwt_issuer,
    access_token_expiry=service_config.jwt_expiration,
)
app.state.internal_service_secret = service_config.internal_service_secret


# ==================== Dependency Injection ====================


def get_shipment_service() -> ShipmentService:
    """Get shipment service instance"""
    if shipment_service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return shipment_service


# ==================== Health Check ====================


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    db_connected = shipment_service is not None and await shipment_service.check_connection()
    health = {
        "status": "healthy" if db_connected else "unhealthy",
        "service": SERVICE_METADATA["service_name"],
        "port": service_config.service_port,
        "version": SERVICE_METADATA["version"],
        "database": "connected" if db_connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(content=health, status_code=200 if db_connected else 503)


@app.get("/api/v1/shipments/info", response_model=ServiceInfo)
async def service_info():
    """Service information"""
    return ServiceInfo(
        service=SERVICE_METADATA["service_name"],
        version=SERVICE_METADATA["version"],
        description="Shipment lifecycle and tracking service",
        capabilities=SERVICE_METADATA["capabilities"] + [
            f"routes:{get_routes_summary()['route_count']}"
        ],
    )


# ==================== Public Tracking ====================


@app.get("/api/track/{tracking_number}", response_model=Shipment)
async def track_shipment(
    tracking_number: str,
    service: ShipmentService = Depends(get_shipment_service),
):
    """Look up a shipment by its public tracking number"""
    return await service.track_shipment(tracking_number)


# ==================== Shipment Management ====================


@app.post("/api/shipments", response_model=Shipment, status_code=201)
async def create_shipment(
    request: ShipmentCreateRequest,
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """
    Create a new shipment

    A tracking number is generated unless one is supplied. The first
    tracking history entry is recorded at the origin.
    """
    return await service.create_shipment(request, actor=user)


@app.get("/api/shipments", response_model=ShipmentListResponse)
async def list_shipments(
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status", description="Filter by status"),
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """List shipments, newest first"""
    return await service.list_shipments(limit=limit, offset=offset, status=status_filter)


@app.get("/api/shipments/{shipment_id}", response_model=Shipment)
async def get_shipment(
    shipment_id: str,
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """Get shipment by ID"""
    return await service.get_shipment(shipment_id)


@app.put("/api/shipments/{shipment_id}", response_model=Shipment)
async def update_shipment(
    shipment_id: str,
    request: ShipmentUpdateRequest,
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """Update shipment fields"""
    return await service.update_shipment(shipment_id, request, actor=user)


@app.put("/api/shipments/{shipment_id}/status", response_model=Shipment)
async def update_shipment_status(
    shipment_id: str,
    request: StatusUpdateRequest,
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """
    Update shipment status

    Appends a tracking history entry. Location defaults to the shipment
    origin and message to "Status updated to <status>".
    """
    return await service.update_status(
        shipment_id,
        status=request.status,
        location=request.location,
        message=request.message,
        actor=user,
    )


@app.delete("/api/shipments/{shipment_id}", response_model=DeleteShipmentResponse)
async def delete_shipment(
    shipment_id: str,
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """Delete shipment"""
    await service.delete_shipment(shipment_id)
    return DeleteShipmentResponse(success=True, message=f"Shipment {shipment_id} deleted")


# ==================== Reporting ====================


@app.get("/api/stats", response_model=ShipmentStats)
async def get_stats(
    user: AuthenticatedUser = Depends(require_admin),
    service: ShipmentService = Depends(get_shipment_service),
):
    """Shipment counts and recent shipments"""
    return await service.get_stats()


# ==================== Error Handlers ====================


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ShipmentValidationError)
async def validation_error_handler(request: Request, exc: ShipmentValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)}
    )


@app.exception_handler(ShipmentNotFoundError)
async def not_found_error_handler(request: Request, exc: ShipmentNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)}
    )


@app.exception_handler(DuplicateTrackingNumberError)
async def duplicate_error_handler(request: Request, exc: DuplicateTrackingNumberError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)}
    )


@app.exception_handler(InvalidStatusTransitionError)
async def transition_error_handler(request: Request, exc: InvalidStatusTransitionError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)}
    )


@app.exception_handler(GenerationExhaustedError)
async def generation_error_handler(request: Request, exc: GenerationExhaustedError):
    logger.error(f"Tracking number generation exhausted on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Could not allocate a tracking number, please retry"}
    )


@app.exception_handler(ShipmentServiceError)
async def service_error_handler(request: Request, exc: ShipmentServiceError):
    logger.error(f"Shipment service error on {request.url.path}: {exc}")
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
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    config_manager.print_config_summary()

    uvicorn.run(
        "microservices.shipment_service.main:app",
        host=service_config.service_host,
        port=service_config.service_port,
        reload=service_config.debug,
        log_level=service_config.log_level.lower(),
    )
