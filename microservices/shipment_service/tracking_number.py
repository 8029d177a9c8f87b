"""
Tracking Number Generator

Public tracking numbers are exactly nine ASCII digits, drawn uniformly from
[100000000, 999999999]. Uniqueness is checked through an injected async
"already exists" predicate; the store's unique index is the final guard.
"""

import logging
import random
import re
from typing import AsyncIterator, Awaitable, Callable, Optional

from .protocols import GenerationExhaustedError, ShipmentValidationError

logger = logging.getLogger(__name__)

TRACKING_NUMBER_MIN = 100_000_000
TRACKING_NUMBER_MAX = 999_999_999
DEFAULT_MAX_ATTEMPTS = 10

# [0-9] rather than \d: Unicode digits are not valid tracking numbers
_TRACKING_NUMBER_RE = re.compile(r"[0-9]{9}")

ExistsPredicate = Callable[[str], Awaitable[bool]]


def is_valid_tracking_number(value: Optional[str]) -> bool:
    """True if value is exactly nine ASCII digits, with nothing around them"""
    if not isinstance(value, str):
        return False
    return _TRACKING_NUMBER_RE.fullmatch(value) is not None


def validate_tracking_number(value: Optional[str]) -> str:
    """
    Validate a caller-supplied tracking number as sent.

    Returns:
        The tracking number, unchanged

    Raises:
        ShipmentValidationError: not exactly nine ASCII digits (blank and
            padded values included)
    """
    if not is_valid_tracking_number(value):
        raise ShipmentValidationError(
            f"Invalid tracking number {value!r}: expected exactly 9 digits"
        )
    return value


class TrackingNumberGenerator:
    """
    Draws random tracking numbers until one is free.

    Args:
        exists: async predicate reporting whether a number is already assigned
        rng: random source (defaults to SystemRandom)
        max_attempts: draws before giving up
    """

    def __init__(
        self,
        exists: ExistsPredicate,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.exists = exists
        self.rng = rng or random.SystemRandom()
        self.max_attempts = max_attempts

    def draw(self) -> str:
        """One uniform draw, no uniqueness check"""
        return str(self.rng.randint(TRACKING_NUMBER_MIN, TRACKING_NUMBER_MAX))

    async def candidates(self, max_attempts: Optional[int] = None) -> AsyncIterator[str]:
        """
        Yield numbers that passed the exists check, one attempt per draw.

        A consumer that fails to use a yielded number (e.g. the insert hit the
        unique index) asks for the next one; that draw counts against the same
        budget. Raises GenerationExhaustedError once the budget is spent.
        """
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        for attempt in range(1, attempts + 1):
            candidate = self.draw()
            if await self.exists(candidate):
                logger.warning(
                    f"Tracking number collision on {candidate} (attempt {attempt}/{attempts})"
                )
                continue
            yield candidate

        raise GenerationExhaustedError(
            f"Could not generate a unique tracking number after {attempts} attempts"
        )

    async def generate(self, max_attempts: Optional[int] = None) -> str:
        """
        Return a tracking number not currently assigned.

        Raises:
            GenerationExhaustedError: every draw collided
        """
        stream = self.candidates(max_attempts)
        try:
            return await stream.__anext__()
        finally:
            await stream.aclose()


__all__ = [
    "TrackingNumberGenerator",
    "validate_tracking_number",
    "is_valid_tracking_number",
    "TRACKING_NUMBER_MIN",
    "TRACKING_NUMBER_MAX",
    "DEFAULT_MAX_ATTEMPTS",
]
