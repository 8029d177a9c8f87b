"""
Unit Tests for Tracking Number Generation and Validation
"""

import random

import pytest

from microservices.shipment_service.protocols import (
    GenerationExhaustedError,
    ShipmentValidationError,
)
from microservices.shipment_service.tracking_number import (
    TRACKING_NUMBER_MAX,
    TRACKING_NUMBER_MIN,
    TrackingNumberGenerator,
    is_valid_tracking_number,
    validate_tracking_number,
)

from tests.fixtures import ScriptedRandom

pytestmark = pytest.mark.unit


def exists_in(taken):
    async def exists(number):
        return number in taken
    return exists


class TestValidateTrackingNumber:
    """Tests for validate_tracking_number"""

    @pytest.mark.parametrize("value", ["123456789", "100000000", "999999999", "000000001"])
    def test_accepts_nine_digits(self, value):
        assert validate_tracking_number(value) == value

    @pytest.mark.parametrize("value", [" 123456789", "123456789 ", "  123456789\n", "123456789\n"])
    def test_rejects_padding(self, value):
        assert is_valid_tracking_number(value) is False
        with pytest.raises(ShipmentValidationError):
            validate_tracking_number(value)

    @pytest.mark.parametrize("value", [
        "12345678",       # too short
        "1234567890",     # too long
        "12345678a",
        "123 456 789",
        "",
        "   ",
        "٣٤٥٦٧٨٩٠١",      # Arabic-Indic digits
        "１２３４５６７８９",  # fullwidth digits
    ])
    def test_rejects_malformed(self, value):
        with pytest.raises(ShipmentValidationError):
            validate_tracking_number(value)

    def test_rejects_none(self):
        assert is_valid_tracking_number(None) is False
        with pytest.raises(ShipmentValidationError):
            validate_tracking_number(None)


class TestTrackingNumberGenerator:
    """Tests for TrackingNumberGenerator"""

    @pytest.mark.asyncio
    async def test_generates_nine_digits_in_range(self):
        generator = TrackingNumberGenerator(exists_in(set()), rng=random.Random(42))

        for _ in range(200):
            number = await generator.generate()
            assert len(number) == 9
            assert number.isdigit()
            assert TRACKING_NUMBER_MIN <= int(number) <= TRACKING_NUMBER_MAX

    @pytest.mark.asyncio
    async def test_default_rng_is_system_random(self):
        generator = TrackingNumberGenerator(exists_in(set()))
        assert isinstance(generator.rng, random.SystemRandom)
        assert is_valid_tracking_number(await generator.generate())

    @pytest.mark.asyncio
    async def test_redraws_on_collision(self):
        rng = ScriptedRandom([111111111, 222222222, 333333333])
        generator = TrackingNumberGenerator(exists_in({"111111111", "222222222"}), rng=rng)

        assert await generator.generate() == "333333333"
        assert rng.calls == 3

    @pytest.mark.asyncio
    async def test_exhausts_after_max_attempts(self):
        rng = ScriptedRandom([555555555] * 10)
        generator = TrackingNumberGenerator(exists_in({"555555555"}), rng=rng)

        with pytest.raises(GenerationExhaustedError):
            await generator.generate()
        assert rng.calls == 10

    @pytest.mark.asyncio
    async def test_succeeds_on_last_attempt(self):
        rng = ScriptedRandom([555555555] * 9 + [666666666])
        generator = TrackingNumberGenerator(exists_in({"555555555"}), rng=rng)

        assert await generator.generate() == "666666666"

    @pytest.mark.asyncio
    async def test_candidates_share_one_budget(self):
        rng = ScriptedRandom([111111111, 222222222, 333333333])
        generator = TrackingNumberGenerator(exists_in({"222222222"}), rng=rng, max_attempts=3)

        yielded = []
        with pytest.raises(GenerationExhaustedError):
            async for candidate in generator.candidates():
                yielded.append(candidate)

        assert yielded == ["111111111", "333333333"]
        assert rng.calls == 3

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            TrackingNumberGenerator(exists_in(set()), max_attempts=0)
