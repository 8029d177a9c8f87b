"""
Shipment Service Data Models

Pydantic models for shipments, the tracking-history ledger and reporting.

Attributes are snake_case; the wire and storage format is camelCase
(trackingNumber, trackingHistory, updatedBy, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _normalize_enum_value(value: str) -> str:
    return " ".join(value.strip().lower().replace("_", " ").replace("-", " ").split())


# ====================
# Enum Types
# ====================

class ShipmentStatus(str, Enum):
    """Shipment status"""
    PENDING = "pending"
    ON_HOLD = "on hold"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"
    # Extended statuses
    PROCESSING = "processing"
    IN_TRANSIT = "in transit"
    REJECTED = "rejected"
    AWARDED = "awarded"

    @classmethod
    def _missing_(cls, value):
        # Accept OUT_FOR_DELIVERY, out-for-delivery, "On Hold", ...
        if isinstance(value, str):
            normalized = _normalize_enum_value(value)
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class ShipmentType(str, Enum):
    """Transport mode"""
    AIR = "AIR"
    WATER = "WATER"
    ROAD = "ROAD"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class PaymentMode(str, Enum):
    """How the shipment is paid for"""
    CASH = "cash"
    BANK_TRANSFER = "bank transfer"
    CARD = "card"
    MOBILE_MONEY = "mobile money"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = _normalize_enum_value(value)
            for member in cls:
                if member.value == normalized:
                    return member
        return None


# Statuses counted as in-progress handling by the stats report
ACTIVE_STATUSES = frozenset({
    ShipmentStatus.PROCESSING,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.ON_HOLD,
    ShipmentStatus.OUT_FOR_DELIVERY,
})

# Display name recorded in history when no acting user is known
DEFAULT_ACTOR_NAME = "Admin"

# Location recorded when neither a location nor the origin is available
UNKNOWN_LOCATION = "Unknown"

# Message of the history entry synthesized at creation
CREATED_MESSAGE = "Shipment created"


class WireModel(BaseModel):
    """Base model with camelCase aliases"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ====================
# Core Data Models
# ====================

class TrackingEvent(WireModel):
    """One entry of the append-only tracking history"""
    status: ShipmentStatus
    location: str
    message: str
    timestamp: datetime
    updated_by: Optional[str] = None


class Shipment(WireModel):
    """Shipment record"""
    shipment_id: str = Field(..., alias="id", description="Internal shipment ID")
    tracking_number: str = Field(..., description="9-digit public tracking number")

    # Parties
    recipient_name: str
    recipient_email: Optional[str] = None
    recipient_phone: str
    delivery_address: str
    origin: str
    destination: str

    # Logistics
    carrier: Optional[str] = None
    carrier_ref: Optional[str] = None
    shipment_type: Optional[ShipmentType] = None
    product: Optional[str] = None
    quantity: Optional[int] = None
    piece_type: Optional[str] = None
    dimensions: Optional[str] = None
    weight: Optional[float] = None
    payment_mode: Optional[PaymentMode] = None

    # Scheduling
    expected_delivery_date: Optional[datetime] = None
    departure_time: Optional[str] = None
    pickup_date: Optional[datetime] = None

    # Lifecycle
    status: ShipmentStatus = ShipmentStatus.PENDING
    tracking_history: List[TrackingEvent] = Field(default_factory=list)

    # Ownership
    created_by: Optional[str] = None

    # Timestamps
    created_at: datetime
    updated_at: datetime

    @property
    def last_event(self) -> Optional[TrackingEvent]:
        return self.tracking_history[-1] if self.tracking_history else None


# Attributes a full-record update may change
MUTABLE_FIELDS = (
    "recipient_name",
    "recipient_email",
    "recipient_phone",
    "delivery_address",
    "origin",
    "destination",
    "carrier",
    "carrier_ref",
    "shipment_type",
    "product",
    "quantity",
    "piece_type",
    "dimensions",
    "weight",
    "payment_mode",
    "expected_delivery_date",
    "departure_time",
    "pickup_date",
)

# Attributes that must be present and non-blank on every shipment
REQUIRED_FIELDS = (
    "recipient_name",
    "recipient_phone",
    "delivery_address",
    "origin",
    "destination",
)


# ====================
# Request Models
# ====================

class ShipmentCreateRequest(WireModel):
    """
    Create shipment request.

    Required parties are checked by the lifecycle engine, not here, so a
    missing field is reported as a validation error listing every gap.
    """
    tracking_number: Optional[str] = None

    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    delivery_address: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None

    carrier: Optional[str] = None
    carrier_ref: Optional[str] = None
    shipment_type: Optional[ShipmentType] = None
    product: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    piece_type: Optional[str] = None
    dimensions: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0)
    payment_mode: Optional[PaymentMode] = None

    expected_delivery_date: Optional[datetime] = None
    departure_time: Optional[str] = None
    pickup_date: Optional[datetime] = None

    status: Optional[ShipmentStatus] = None


class ShipmentUpdateRequest(WireModel):
    """
    Full-record update. Only fields present in the body are applied.

    A status in the body is recorded through the tracking history like a
    status update; tracking number and creation time cannot change.
    """
    tracking_number: Optional[str] = None

    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_phone: Optional[str] = None
    delivery_address: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None

    carrier: Optional[str] = None
    carrier_ref: Optional[str] = None
    shipment_type: Optional[ShipmentType] = None
    product: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    piece_type: Optional[str] = None
    dimensions: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0)
    payment_mode: Optional[PaymentMode] = None

    expected_delivery_date: Optional[datetime] = None
    departure_time: Optional[str] = None
    pickup_date: Optional[datetime] = None

    status: Optional[ShipmentStatus] = None
    location: Optional[str] = None
    message: Optional[str] = None


class StatusUpdateRequest(WireModel):
    """Status transition request"""
    status: Optional[ShipmentStatus] = None
    location: Optional[str] = None
    message: Optional[str] = None


# ====================
# Response Models
# ====================

class ShipmentListResponse(WireModel):
    """Paged shipment list"""
    shipments: List[Shipment]
    total: int
    limit: int
    offset: int


class ShipmentSummary(WireModel):
    """Compact shipment view used by the stats report"""
    shipment_id: str = Field(..., alias="id")
    tracking_number: str
    recipient_name: str
    origin: str
    destination: str
    status: ShipmentStatus
    created_at: datetime
    created_by: Optional[str] = None
    created_by_username: Optional[str] = None


class ShipmentStats(WireModel):
    """Aggregate counts and recent activity"""
    total_count: int = 0
    active_count: int = 0
    delivered_count: int = 0
    pending_count: int = 0
    recent_shipments: List[ShipmentSummary] = Field(default_factory=list)


class DeleteShipmentResponse(BaseModel):
    """Delete result"""
    success: bool
    message: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: dict = Field(default_factory=dict)


class ServiceInfo(BaseModel):
    """Service information"""
    service: str
    version: str
    description: str
    capabilities: List[str]
