"""
Shipment Service Business Logic

Lifecycle engine for shipments: creation with a unique tracking number and
an initial history entry, audited status transitions, silent field patches,
deletion, public tracking and the admin statistics report.

Uses dependency injection for testability:
- Repository is injected, not created at import time
- Tracking number generator, transition policy and identity client are optional
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.auth_dependencies import AuthenticatedUser

from .models import (
    ACTIVE_STATUSES,
    CREATED_MESSAGE,
    DEFAULT_ACTOR_NAME,
    REQUIRED_FIELDS,
    UNKNOWN_LOCATION,
    Shipment,
    ShipmentCreateRequest,
    ShipmentListResponse,
    ShipmentStats,
    ShipmentStatus,
    ShipmentSummary,
    ShipmentUpdateRequest,
    TrackingEvent,
)
from .protocols import (
    DuplicateTrackingNumberError,
    HistoryEntryBuilder,
    IdentityClientProtocol,
    InvalidStatusTransitionError,
    ShipmentNotFoundError,
    ShipmentRepositoryProtocol,
    ShipmentServiceError,
    ShipmentValidationError,
)
from .status_policy import TransitionPolicy, permissive_policy
from .tracking_number import (
    TrackingNumberGenerator,
    is_valid_tracking_number,
    validate_tracking_number,
)

logger = logging.getLogger(__name__)

RECENT_SHIPMENTS_LIMIT = 5


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip a string; blank becomes None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _actor_name(actor: Optional[AuthenticatedUser]) -> str:
    if actor is None:
        return DEFAULT_ACTOR_NAME
    return actor.display_name or DEFAULT_ACTOR_NAME


class ShipmentService:
    """
    Shipment lifecycle business logic service

    Handles all shipment operations while delegating data access to the
    repository layer. Every status change goes through the repository's
    atomic append_history, so status and tracking history never diverge.
    """

    def __init__(
        self,
        repository: Optional[ShipmentRepositoryProtocol] = None,
        generator: Optional[TrackingNumberGenerator] = None,
        transition_policy: Optional[TransitionPolicy] = None,
        identity_client: Optional[IdentityClientProtocol] = None,
    ):
        """
        Initialize service with injected dependencies.

        Args:
            repository: Repository (inject mock for testing)
            generator: Tracking number generator (defaults to one backed by the repository)
            transition_policy: Status transition policy (defaults to permissive)
            identity_client: Resolves creator ids to usernames for reports
        """
        self.repo = repository
        if generator is None and repository is not None:
            generator = TrackingNumberGenerator(repository.tracking_number_exists)
        self.generator = generator
        self.transition_policy = transition_policy or permissive_policy
        self.identity_client = identity_client

    # ==================== Creation ====================

    async def create_shipment(
        self,
        request: ShipmentCreateRequest,
        actor: Optional[AuthenticatedUser] = None,
    ) -> Shipment:
        """
        Create a shipment with a tracking number and its first history entry.

        Raises:
            ShipmentValidationError: required fields missing or bad tracking number
            DuplicateTrackingNumberError: supplied tracking number already in use
            GenerationExhaustedError: no free tracking number could be generated
            ShipmentServiceError: storage failure
        """
        values = self._validate_create_request(request)
        explicit_number = request.tracking_number
        if explicit_number is not None:
            explicit_number = validate_tracking_number(explicit_number)

        try:
            if explicit_number is not None:
                if await self.repo.tracking_number_exists(explicit_number):
                    raise DuplicateTrackingNumberError(
                        f"Tracking number {explicit_number} already exists"
                    )
                shipment = await self.repo.create_shipment(
                    self._build_shipment(explicit_number, values, request, actor)
                )
            else:
                shipment = await self._create_with_generated_number(values, request, actor)
        except ShipmentServiceError:
            raise
        except Exception as e:
            logger.error(f"Error creating shipment: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to create shipment") from e

        logger.info(
            f"Shipment created: {shipment.shipment_id} "
            f"(tracking {shipment.tracking_number}, status {shipment.status.value})"
        )
        return shipment

    async def _create_with_generated_number(
        self,
        values: Dict[str, Any],
        request: ShipmentCreateRequest,
        actor: Optional[AuthenticatedUser],
    ) -> Shipment:
        # Insert collisions consume the same attempt budget as pre-check collisions
        candidates = self.generator.candidates()
        try:
            async for tracking_number in candidates:
                try:
                    return await self.repo.create_shipment(
                        self._build_shipment(tracking_number, values, request, actor)
                    )
                except DuplicateTrackingNumberError:
                    logger.warning(
                        f"Tracking number {tracking_number} taken at insert, retrying"
                    )
        finally:
            await candidates.aclose()
        # candidates() raises GenerationExhaustedError when the budget runs out
        raise ShipmentServiceError("Tracking number generation ended unexpectedly")

    def _validate_create_request(self, request: ShipmentCreateRequest) -> Dict[str, Any]:
        values = {}
        missing = []
        for field_name in REQUIRED_FIELDS:
            value = _clean(getattr(request, field_name))
            if value is None:
                missing.append(field_name)
            values[field_name] = value
        if missing:
            raise ShipmentValidationError(
                f"Missing required fields: {', '.join(missing)}"
            )
        return values

    def _build_shipment(
        self,
        tracking_number: str,
        values: Dict[str, Any],
        request: ShipmentCreateRequest,
        actor: Optional[AuthenticatedUser],
    ) -> Shipment:
        now = datetime.now(timezone.utc)
        status = request.status or ShipmentStatus.PENDING
        first_event = TrackingEvent(
            status=status,
            location=values["origin"],
            message=CREATED_MESSAGE,
            timestamp=now,
            updated_by=_actor_name(actor),
        )
        optional = request.model_dump(
            exclude=set(REQUIRED_FIELDS) | {"tracking_number", "status"}
        )
        return Shipment(
            shipment_id=f"shp_{uuid.uuid4().hex[:12]}",
            tracking_number=tracking_number,
            **values,
            **optional,
            status=status,
            tracking_history=[first_event],
            created_by=actor.user_id if actor else None,
            created_at=now,
            updated_at=now,
        )

    # ==================== Status Transitions ====================

    def _next_entry(
        self,
        current: Shipment,
        status: Optional[ShipmentStatus],
        location: Optional[str],
        message: Optional[str],
        updated_by: str,
    ) -> TrackingEvent:
        target = status or current.status
        if not self.transition_policy(current.status, target):
            raise InvalidStatusTransitionError(current.status, target)
        return TrackingEvent(
            status=target,
            location=location or _clean(current.origin) or UNKNOWN_LOCATION,
            message=message or f"Status updated to {target.value}",
            timestamp=datetime.now(timezone.utc),
            updated_by=updated_by,
        )

    async def _append(
        self,
        shipment_id: str,
        build_entry: HistoryEntryBuilder,
        fields: Optional[Dict[str, Any]] = None,
    ) -> Shipment:
        try:
            updated = await self.repo.append_history(shipment_id, build_entry, fields)
        except ShipmentServiceError:
            raise
        except Exception as e:
            logger.error(f"Error updating shipment {shipment_id}: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to update shipment") from e

        if updated is None:
            raise ShipmentNotFoundError(f"Shipment not found: {shipment_id}")
        return updated

    async def update_status(
        self,
        shipment_id: str,
        status: Optional[ShipmentStatus] = None,
        location: Optional[str] = None,
        message: Optional[str] = None,
        actor: Optional[AuthenticatedUser] = None,
    ) -> Shipment:
        """
        Record a status change (or a repeat of the current status) in the history.

        Raises:
            ShipmentNotFoundError: unknown shipment
            InvalidStatusTransitionError: rejected by the transition policy
            ShipmentServiceError: storage failure
        """
        location = _clean(location)
        message = _clean(message)
        updated_by = _actor_name(actor)

        updated = await self._append(
            shipment_id,
            lambda current: self._next_entry(current, status, location, message, updated_by),
        )

        logger.info(
            f"Shipment {shipment_id} status -> {updated.status.value} by {updated_by}"
        )
        return updated

    # ==================== Field Updates ====================

    async def update_shipment(
        self,
        shipment_id: str,
        request: ShipmentUpdateRequest,
        actor: Optional[AuthenticatedUser] = None,
    ) -> Shipment:
        """
        Patch shipment fields without touching the tracking history.

        When the request carries a status, the fields and any history entry
        are stored together under the row lock, and the policy is checked
        against the locked record: a rejected transition stores nothing. An
        entry is added when the status differs from the stored one, or when
        a location or message comes with it. location and message are only
        accepted together with a status.

        Raises:
            ShipmentNotFoundError: unknown shipment
            ShipmentValidationError: blanked required field, changed tracking
                number, or location/message without a status
            InvalidStatusTransitionError: status change rejected by the policy
        """
        fields = request.model_dump(exclude_unset=True)
        requested_number = fields.pop("tracking_number", None)
        status = fields.pop("status", None)
        location = _clean(fields.pop("location", None))
        message = _clean(fields.pop("message", None))

        if status is None and (location or message):
            raise ShipmentValidationError("location and message require a status")

        blanked = []
        for field_name in REQUIRED_FIELDS:
            if field_name in fields:
                value = _clean(fields[field_name])
                if value is None:
                    blanked.append(field_name)
                fields[field_name] = value
        if blanked:
            raise ShipmentValidationError(
                f"Required fields cannot be empty: {', '.join(blanked)}"
            )

        current = await self.get_shipment(shipment_id)
        if requested_number is not None and requested_number != current.tracking_number:
            raise ShipmentValidationError("Tracking number cannot be changed")

        if status is None:
            if not fields:
                return current
            try:
                updated = await self.repo.update_shipment(shipment_id, fields)
            except ShipmentServiceError:
                raise
            except Exception as e:
                logger.error(f"Error updating shipment {shipment_id}: {e}", exc_info=True)
                raise ShipmentServiceError("Failed to update shipment") from e
            if updated is None:
                raise ShipmentNotFoundError(f"Shipment not found: {shipment_id}")
            logger.info(f"Shipment {shipment_id} updated: {', '.join(sorted(fields))}")
            return updated

        updated_by = _actor_name(actor)

        def build_entry(locked: Shipment) -> Optional[TrackingEvent]:
            if status == locked.status and not (location or message):
                return None
            return self._next_entry(locked, status, location, message, updated_by)

        updated = await self._append(shipment_id, build_entry, fields)
        logger.info(
            f"Shipment {shipment_id} updated: {', '.join(sorted(fields)) or 'no fields'}, "
            f"status {updated.status.value} by {updated_by}"
        )
        return updated

    # ==================== Deletion ====================

    async def delete_shipment(self, shipment_id: str) -> None:
        """
        Hard delete a shipment.

        Raises:
            ShipmentNotFoundError: unknown shipment
        """
        try:
            deleted = await self.repo.delete_shipment(shipment_id)
        except Exception as e:
            logger.error(f"Error deleting shipment {shipment_id}: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to delete shipment") from e

        if not deleted:
            raise ShipmentNotFoundError(f"Shipment not found: {shipment_id}")
        logger.info(f"Shipment deleted: {shipment_id}")

    # ==================== Reads ====================

    async def track_shipment(self, tracking_number: str) -> Shipment:
        """
        Public lookup by tracking number.

        Malformed numbers are reported as not found without touching storage.
        """
        if not is_valid_tracking_number(tracking_number):
            raise ShipmentNotFoundError(f"Shipment not found: {tracking_number}")

        try:
            shipment = await self.repo.get_shipment_by_tracking(tracking_number)
        except Exception as e:
            logger.error(f"Error tracking shipment {tracking_number}: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to look up shipment") from e

        if shipment is None:
            raise ShipmentNotFoundError(f"Shipment not found: {tracking_number}")
        return shipment

    async def get_shipment(self, shipment_id: str) -> Shipment:
        try:
            shipment = await self.repo.get_shipment(shipment_id)
        except Exception as e:
            logger.error(f"Error getting shipment {shipment_id}: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to get shipment") from e

        if shipment is None:
            raise ShipmentNotFoundError(f"Shipment not found: {shipment_id}")
        return shipment

    async def list_shipments(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[ShipmentStatus] = None,
    ) -> ShipmentListResponse:
        """List shipments, newest first"""
        try:
            shipments, total = await asyncio.gather(
                self.repo.list_shipments(limit=limit, offset=offset, status=status),
                self.repo.count_shipments([status] if status else None),
            )
        except Exception as e:
            logger.error(f"Error listing shipments: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to list shipments") from e

        return ShipmentListResponse(
            shipments=shipments, total=total, limit=limit, offset=offset
        )

    # ==================== Reporting ====================

    async def get_stats(self) -> ShipmentStats:
        """Aggregate counts plus the most recently created shipments"""
        try:
            total, active, delivered, pending, recent = await asyncio.gather(
                self.repo.count_shipments(),
                self.repo.count_shipments(ACTIVE_STATUSES),
                self.repo.count_shipments([ShipmentStatus.DELIVERED]),
                self.repo.count_shipments([ShipmentStatus.PENDING]),
                self.repo.list_shipments(limit=RECENT_SHIPMENTS_LIMIT, offset=0),
            )
        except Exception as e:
            logger.error(f"Error computing shipment stats: {e}", exc_info=True)
            raise ShipmentServiceError("Failed to compute shipment stats") from e

        usernames = await self._resolve_usernames(
            {s.created_by for s in recent if s.created_by}
        )
        summaries = [
            ShipmentSummary(
                shipment_id=s.shipment_id,
                tracking_number=s.tracking_number,
                recipient_name=s.recipient_name,
                origin=s.origin,
                destination=s.destination,
                status=s.status,
                created_at=s.created_at,
                created_by=s.created_by,
                created_by_username=usernames.get(s.created_by),
            )
            for s in recent
        ]

        return ShipmentStats(
            total_count=total,
            active_count=active,
            delivered_count=delivered,
            pending_count=pending,
            recent_shipments=summaries,
        )

    async def _resolve_usernames(self, user_ids: set) -> Dict[str, Optional[str]]:
        """Best-effort id -> username lookup; failures leave the name unset"""
        if not self.identity_client or not user_ids:
            return {}

        ids = list(user_ids)
        # Concurrent, so the report waits at most one lookup timeout
        results = await asyncio.gather(
            *(self.identity_client.get_username(user_id) for user_id in ids),
            return_exceptions=True,
        )

        resolved: Dict[str, Optional[str]] = {}
        for user_id, result in zip(ids, results):
            if isinstance(result, Exception):
                logger.warning(f"Could not resolve username for {user_id}: {result}")
                resolved[user_id] = None
            else:
                resolved[user_id] = result
        return resolved

    # ==================== Health ====================

    async def check_connection(self) -> bool:
        check = getattr(self.repo, "check_connection", None)
        if check is None:
            return True
        try:
            return await check()
        except Exception as e:
            logger.warning(f"Shipment store health check failed: {e}")
            return False


__all__ = ["ShipmentService", "RECENT_SHIPMENTS_LIMIT"]
