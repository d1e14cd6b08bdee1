"""Remote key-value replica on Pantry (getpantry.cloud)."""
import logging
from typing import Any, Optional

import httpx

from app.exceptions import RemoteUnavailable


logger = logging.getLogger(__name__)

LOGS_BASKET = "worklogs"
SESSION_BASKET = "session"

# Pantry answers 400 for a basket that was never written.
_MISSING_STATUSES = {400, 404}


class PantryClient:
    """Client for one pantry (identified by its pantry id)."""

    def __init__(self, pantry_id: str, http: httpx.AsyncClient, base_url: str):
        """
        Initialize client.

        Args:
            pantry_id: Pantry identifier (acts as the credential)
            http: Shared async HTTP client
            base_url: Pantry API base URL
        """
        self.pantry_id = pantry_id
        self.http = http
        self.base_url = base_url.rstrip("/")

    def _basket_url(self, basket: str) -> str:
        return f"{self.base_url}/{self.pantry_id}/basket/{basket}"

    async def validate(self) -> bool:
        """
        Check that the pantry exists.

        Returns:
            True if the pantry answered with its details

        Raises:
            RemoteUnavailable: If the pantry could not be reached
        """
        try:
            response = await self.http.get(f"{self.base_url}/{self.pantry_id}")
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"Pantry unreachable: {e}") from e
        return response.is_success

    async def fetch(self, basket: str) -> Optional[Any]:
        """
        Fetch a basket's JSON content.

        Args:
            basket: Basket name

        Returns:
            Decoded JSON, or None if the basket does not exist or is not JSON

        Raises:
            RemoteUnavailable: On network errors, timeouts or server errors
        """
        try:
            response = await self.http.get(self._basket_url(basket))
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"Fetching basket {basket!r} failed: {e}") from e

        if response.status_code in _MISSING_STATUSES:
            return None
        if not response.is_success:
            raise RemoteUnavailable(
                f"Fetching basket {basket!r} failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError:
            logger.warning("Basket %r returned a non-JSON body", basket)
            return None

    async def push(self, basket: str, payload: Any) -> None:
        """
        Replace a basket's content.

        Args:
            basket: Basket name
            payload: JSON-serializable content

        Raises:
            RemoteUnavailable: If the write did not succeed
        """
        try:
            response = await self.http.post(self._basket_url(basket), json=payload)
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"Writing basket {basket!r} failed: {e}") from e

        if not response.is_success:
            raise RemoteUnavailable(
                f"Writing basket {basket!r} failed with status {response.status_code}"
            )
