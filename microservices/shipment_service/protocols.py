"""
Shipment Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import Shipment, ShipmentStatus, TrackingEvent


# Custom exceptions - defined here to avoid importing repository
class ShipmentServiceError(Exception):
    """Base exception for shipment service errors"""
    pass


class ShipmentValidationError(ShipmentServiceError):
    """Shipment validation error"""
    pass


class ShipmentNotFoundError(ShipmentServiceError):
    """Shipment not found error"""
    pass


class DuplicateTrackingNumberError(ShipmentServiceError):
    """Tracking number already assigned to another shipment"""
    pass


class GenerationExhaustedError(ShipmentServiceError):
    """No free tracking number found within the attempt budget"""
    pass


class InvalidStatusTransitionError(ShipmentServiceError):
    """Status change rejected by the transition policy"""

    def __init__(self, current: ShipmentStatus, target: ShipmentStatus):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot change status from '{current.value}' to '{target.value}'"
        )


# Builds the next history entry from the locked current record; None adds no entry
HistoryEntryBuilder = Callable[[Shipment], Optional[TrackingEvent]]


@runtime_checkable
class ShipmentRepositoryProtocol(Protocol):
    """
    Interface for Shipment Repository.

    Implementations must provide these methods.
    Used for dependency injection to enable testing.
    """

    async def initialize(self) -> None:
        """Prepare storage (schema bootstrap)"""
        ...

    async def close(self) -> None:
        """Release storage resources"""
        ...

    # ==================== Shipment Operations ====================

    async def create_shipment(self, shipment: Shipment) -> Shipment:
        """Insert a new shipment; DuplicateTrackingNumberError on collision"""
        ...

    async def get_shipment(self, shipment_id: str) -> Optional[Shipment]:
        """Get shipment by internal id"""
        ...

    async def get_shipment_by_tracking(self, tracking_number: str) -> Optional[Shipment]:
        """Get shipment by tracking number"""
        ...

    async def tracking_number_exists(self, tracking_number: str) -> bool:
        """Check whether a tracking number is already assigned"""
        ...

    async def update_shipment(
        self, shipment_id: str, fields: Dict[str, Any]
    ) -> Optional[Shipment]:
        """Merge fields into the record and bump updated_at"""
        ...

    async def append_history(
        self,
        shipment_id: str,
        build_entry: HistoryEntryBuilder,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Shipment]:
        """
        Atomically append build_entry(current) to the history, set status to
        the entry's status, merge fields and bump updated_at. All of it or
        none of it is stored. None if the id is unknown.
        """
        ...

    async def delete_shipment(self, shipment_id: str) -> bool:
        """Delete a shipment"""
        ...

    # ==================== Queries ====================

    async def list_shipments(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[ShipmentStatus] = None,
    ) -> List[Shipment]:
        """List shipments, newest first"""
        ...

    async def count_shipments(
        self, statuses: Optional[Iterable[ShipmentStatus]] = None
    ) -> int:
        """Count shipments, optionally restricted to a status set"""
        ...


@runtime_checkable
class IdentityClientProtocol(Protocol):
    """Interface for resolving user ids to display names"""

    async def get_username(self, user_id: str) -> Optional[str]:
        """Username for a user id, None if unknown"""
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "ShipmentServiceError",
    "ShipmentValidationError",
    "ShipmentNotFoundError",
    "DuplicateTrackingNumberError",
    "GenerationExhaustedError",
    "InvalidStatusTransitionError",
    "HistoryEntryBuilder",
    "ShipmentRepositoryProtocol",
    "IdentityClientProtocol",
]
