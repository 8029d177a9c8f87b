"""
Auth Service Client for Shipment Service

HTTP client used to resolve user ids (shipment creators) to usernames
through auth_service's internal identity endpoint.
"""

import httpx
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class AuthClient:
    """Client for auth_service"""

    def __init__(
        self,
        base_url: str = "http://localhost:8201",
        internal_secret: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Auth Service client

        Args:
            base_url: Auth service base URL
            internal_secret: Shared secret for internal service calls
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.internal_secret = internal_secret
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)
        logger.info(f"AuthClient initialized with base_url: {self.base_url}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _internal_headers(self) -> Dict[str, str]:
        headers = {"X-Internal-Service": "true"}
        if self.internal_secret:
            headers["X-Internal-Service-Secret"] = self.internal_secret
        return headers

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a user's public identity {id, username, isAdmin}

        Returns:
            Identity dict, or None if unknown or auth_service is unreachable
        """
        try:
            response = await self.client.get(
                f"{self.base_url}/api/v1/auth/users/{user_id}",
                headers=self._internal_headers(),
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Failed to get user {user_id}: {e.response.status_code}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Error getting user {user_id}: {e}")
            return None

    async def get_username(self, user_id: str) -> Optional[str]:
        """Username for a user id, None if it cannot be resolved"""
        user = await self.get_user(user_id)
        if not user:
            return None
        return user.get("username")


__all__ = ["AuthClient"]
