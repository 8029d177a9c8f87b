"""
Shipment Service

Shipment lifecycle and tracking microservice.
Handles shipment creation, status transitions with an append-only tracking
history, public tracking lookups and admin statistics.

Port: 8230
"""

__version__ = "1.0.0"
__service_name__ = "shipment_service"
__service_port__ = 8230
