"""
Shared Test Fixtures

Centralized factories used across all test layers.

Structure:
    - common.py: Base ID generators, timestamps
    - {service}_fixtures.py: Per-service factories
"""

# Common utilities
from .common import (
    make_user_id,
    make_shipment_id,
    make_timestamp,
)

# Shipment service fixtures
from .shipment_fixtures import (
    make_shipment,
    make_shipment_payload,
    make_shipment_create_request,
    ScriptedRandom,
)
