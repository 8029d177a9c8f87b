"""
Unit Tests for the admin statistics report
"""

import asyncio
from datetime import timedelta

import pytest

from microservices.shipment_service.models import ShipmentStatus
from microservices.shipment_service.protocols import ShipmentServiceError
from microservices.shipment_service.shipment_service import ShipmentService

from tests.component.mocks import MockIdentityClient
from tests.fixtures import make_shipment

pytestmark = pytest.mark.unit


def _store(repository, *shipments):
    for i, shipment in enumerate(shipments):
        repository.shipments[shipment.shipment_id] = shipment
        repository._order[shipment.shipment_id] = i


class SlowIdentityClient(MockIdentityClient):
    """Each lookup takes a while; records how many overlap"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_username(self, user_id):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return await super().get_username(user_id)
        finally:
            self.in_flight -= 1


class TestGetStats:

    @pytest.mark.asyncio
    async def test_empty_store(self, shipment_service):
        stats = await shipment_service.get_stats()

        assert stats.total_count == 0
        assert stats.active_count == 0
        assert stats.delivered_count == 0
        assert stats.pending_count == 0
        assert stats.recent_shipments == []

    @pytest.mark.asyncio
    async def test_counts_by_status(self, shipment_service, mock_repository):
        _store(
            mock_repository,
            make_shipment("100000001", ShipmentStatus.PENDING),
            make_shipment("100000002", ShipmentStatus.DELIVERED),
            make_shipment("100000003", ShipmentStatus.OUT_FOR_DELIVERY),
        )

        stats = await shipment_service.get_stats()

        assert stats.total_count == 3
        assert stats.pending_count == 1
        assert stats.delivered_count == 1
        assert stats.active_count == 1

    @pytest.mark.asyncio
    async def test_active_statuses(self, shipment_service, mock_repository):
        _store(
            mock_repository,
            make_shipment("100000001", ShipmentStatus.PROCESSING),
            make_shipment("100000002", ShipmentStatus.IN_TRANSIT),
            make_shipment("100000003", ShipmentStatus.ON_HOLD),
            make_shipment("100000004", ShipmentStatus.REJECTED),
            make_shipment("100000005", ShipmentStatus.AWARDED),
        )

        stats = await shipment_service.get_stats()

        assert stats.total_count == 5
        assert stats.active_count == 3

    @pytest.mark.asyncio
    async def test_recent_is_newest_first_and_capped(self, shipment_service, mock_repository):
        shipments = [
            make_shipment(f"10000000{i}", age=timedelta(hours=i)) for i in range(7)
        ]
        _store(mock_repository, *shipments)

        stats = await shipment_service.get_stats()

        assert [s.tracking_number for s in stats.recent_shipments] == [
            "100000000", "100000001", "100000002", "100000003", "100000004",
        ]

    @pytest.mark.asyncio
    async def test_recent_enriched_with_usernames(self, mock_repository):
        identity = MockIdentityClient(usernames={"usr_alice": "alice"})
        service = ShipmentService(repository=mock_repository, identity_client=identity)
        _store(
            mock_repository,
            make_shipment("100000001", created_by="usr_alice"),
            make_shipment("100000002", created_by="usr_alice", age=timedelta(minutes=1)),
            make_shipment("100000003", created_by="usr_gone", age=timedelta(minutes=2)),
        )

        stats = await service.get_stats()

        names = {s.tracking_number: s.created_by_username for s in stats.recent_shipments}
        assert names == {"100000001": "alice", "100000002": "alice", "100000003": None}
        # One lookup per distinct creator
        assert sorted(identity.calls) == ["usr_alice", "usr_gone"]

    @pytest.mark.asyncio
    async def test_identity_failure_is_tolerated(self, mock_repository):
        identity = MockIdentityClient(usernames={"usr_alice": "alice"}, failing=["usr_bob"])
        service = ShipmentService(repository=mock_repository, identity_client=identity)
        _store(
            mock_repository,
            make_shipment("100000001", created_by="usr_alice"),
            make_shipment("100000002", created_by="usr_bob", age=timedelta(minutes=1)),
        )

        stats = await service.get_stats()

        assert stats.total_count == 2
        assert [s.created_by_username for s in stats.recent_shipments] == ["alice", None]

    @pytest.mark.asyncio
    async def test_creator_lookups_run_concurrently(self, mock_repository):
        identity = SlowIdentityClient(usernames={"usr_a": "a", "usr_b": "b"}, failing=["usr_c"])
        service = ShipmentService(repository=mock_repository, identity_client=identity)
        _store(
            mock_repository,
            make_shipment("100000001", created_by="usr_a"),
            make_shipment("100000002", created_by="usr_b", age=timedelta(minutes=1)),
            make_shipment("100000003", created_by="usr_c", age=timedelta(minutes=2)),
        )

        stats = await service.get_stats()

        assert identity.max_in_flight == 3
        assert [s.created_by_username for s in stats.recent_shipments] == ["a", "b", None]

    @pytest.mark.asyncio
    async def test_without_identity_client(self, mock_repository):
        service = ShipmentService(repository=mock_repository)
        _store(mock_repository, make_shipment("100000001", created_by="usr_alice"))

        stats = await service.get_stats()

        assert stats.recent_shipments[0].created_by == "usr_alice"
        assert stats.recent_shipments[0].created_by_username is None

    @pytest.mark.asyncio
    async def test_storage_error(self, shipment_service, mock_repository):
        mock_repository.set_error(RuntimeError("too many connections"))

        with pytest.raises(ShipmentServiceError):
            await shipment_service.get_stats()
