"""
Shipment Repository Integration Fixtures

Each test gets its own table, dropped afterwards.
"""

import uuid
from typing import AsyncGenerator

import pytest_asyncio

from core.postgres_client import PostgresClient
from microservices.shipment_service.shipment_repository import ShipmentRepository


@pytest_asyncio.fixture(scope="function")
async def shipment_repository(database_url) -> AsyncGenerator[ShipmentRepository, None]:
    """Repository over a throwaway table"""
    db = PostgresClient(database_url, service_name="shipment_integration_tests", max_size=4)
    table = f"shipments_test_{uuid.uuid4().hex[:8]}"
    repository = ShipmentRepository(db, table=table)
    await repository.initialize()
    try:
        yield repository
    finally:
        await db.execute(f"DROP TABLE IF EXISTS {table}")
        await db.close()
