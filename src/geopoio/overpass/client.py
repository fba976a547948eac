"""Overpass API transport."""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from ..core import Config
from ..core.exceptions import OverpassError, RequestCancelled
from ..core.models import CancellationToken

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16 * 1024


class OverpassClient:
    """
    Post Overpass QL queries and return the response ``elements``.

    The blocking ``requests`` call runs in a worker thread so the event loop
    is never blocked. The response body is streamed and the cancellation
    token is checked between chunks, so a superseded request stops reading
    and releases its connection as soon as it notices.
    """

    def __init__(self, config: Optional[Config] = None, session: Optional[requests.Session] = None):
        """
        Initialize OverpassClient.

        Args:
            config: Configuration object (uses defaults if None)
            session: requests Session to reuse (a new one is created if None)
        """
        self.config = config or Config()
        self.session = session or requests.Session()

    async def query(self, payload: str, token: Optional[CancellationToken] = None) -> List[Dict[str, Any]]:
        """
        Run a query.

        Args:
            payload: Overpass QL query text
            token: Cancellation token checked while the response is read

        Returns:
            The raw ``elements`` list (empty if the body has none)

        Raises:
            OverpassError: On transport failure, non-success status or malformed body
            RequestCancelled: If the token was cancelled before the body was read
        """
        token = token or CancellationToken()
        return await asyncio.to_thread(self._post, payload, token)

    def _post(self, payload: str, token: CancellationToken) -> List[Dict[str, Any]]:
        if token.cancelled:
            raise RequestCancelled("Request cancelled before it was sent")

        try:
            response = self.session.post(
                self.config.overpass_url,
                data=payload.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.config.request_timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise OverpassError(f"Overpass request failed: {e}")

        with response:
            if not response.ok:
                raise OverpassError(
                    f"Overpass API error: {response.status_code} - {response.text[:200]}",
                    status_code=response.status_code,
                )

            chunks = []
            try:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if token.cancelled:
                        raise RequestCancelled("Request cancelled while reading the response")
                    chunks.append(chunk)
            except requests.RequestException as e:
                raise OverpassError(f"Overpass response interrupted: {e}")

        return self._parse(b"".join(chunks))

    @staticmethod
    def _parse(body: bytes) -> List[Dict[str, Any]]:
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise OverpassError(f"Malformed Overpass response: {e}")

        if not isinstance(data, dict):
            raise OverpassError("Malformed Overpass response: expected a JSON object")

        elements = data.get("elements") or []
        if not isinstance(elements, list):
            raise OverpassError("Malformed Overpass response: 'elements' is not a list")

        logger.debug("Overpass returned %d elements", len(elements))
        return elements

    def close(self):
        self.session.close()
