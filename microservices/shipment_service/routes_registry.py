"""
Shipment Service Routes Registry
Defines all API routes exposed by the service (served on /api/v1/shipments/info)
"""
from typing import Dict, Any

SERVICE_ROUTES = [
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service health check"
    },
    {
        "path": "/api/v1/shipments/info",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service information"
    },
    # Public tracking
    {
        "path": "/api/track/{tracking_number}",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Track a shipment by tracking number"
    },
    # Shipment management (admin)
    {
        "path": "/api/shipments",
        "methods": ["GET", "POST"],
        "auth_required": True,
        "description": "List/create shipments"
    },
    {
        "path": "/api/shipments/{shipment_id}",
        "methods": ["GET", "PUT", "DELETE"],
        "auth_required": True,
        "description": "Get/update/delete shipment"
    },
    {
        "path": "/api/shipments/{shipment_id}/status",
        "methods": ["PUT"],
        "auth_required": True,
        "description": "Update shipment status"
    },
    # Reporting (admin)
    {
        "path": "/api/stats",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Shipment statistics"
    },
]

SERVICE_METADATA = {
    "service_name": "shipment_service",
    "version": "1.0.0",
    "tags": ["v1", "shipment", "tracking"],
    "capabilities": [
        "shipment_management",
        "status_tracking",
        "public_tracking",
        "shipment_stats",
    ]
}


def get_routes_summary() -> Dict[str, Any]:
    """Compact route metadata for the info endpoint"""
    public = [r["path"] for r in SERVICE_ROUTES if not r["auth_required"]]
    protected = [r["path"] for r in SERVICE_ROUTES if r["auth_required"]]
    return {
        "route_count": len(SERVICE_ROUTES),
        "public_routes": public,
        "admin_routes": protected,
    }
