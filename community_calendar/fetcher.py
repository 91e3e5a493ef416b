"""Data-source boundary: load event and listing payloads.

A payload is a single JSON array fetched once per view. Any failure to obtain
it is terminal (EventsLoadError) with no retry and no partial result. Records
that do not validate are skipped one by one so a single bad record cannot
break the list.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import EventsLoadError
from .models import BaseEvent, DirectoryListing

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

ModelT = TypeVar("ModelT", bound=BaseModel)


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class PayloadFetcher:
    """Fetch JSON payloads from a local path or an HTTP(S) URL."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        shared_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: HTTP timeout in seconds
            shared_client: Optional client to reuse; it is not closed by the fetcher
        """
        self.timeout = timeout
        self.client = shared_client
        self._owns_client = shared_client is None

    async def __aenter__(self) -> PayloadFetcher:
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), follow_redirects=True)
        return self.client

    async def fetch_json(self, source: str) -> Any:
        """Return the decoded JSON document at ``source``.

        Raises:
            EventsLoadError: If the source cannot be read or is not JSON
        """
        if _is_remote(source):
            text = await self._fetch_remote(source)
        else:
            text = self._read_local(source)

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Payload at %s is not valid JSON: %s", source, e)
            raise EventsLoadError(f"Payload at {source} is not valid JSON") from e

    async def _fetch_remote(self, url: str) -> str:
        client = self._ensure_client()
        logger.debug("Fetching payload from %s", url)
        try:
            response = await client.get(url, headers={"Cache-Control": "no-store"})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("HTTP %d fetching %s", status, url)
            raise EventsLoadError(f"HTTP {status} fetching {url}", status) from e
        except httpx.TimeoutException as e:
            logger.warning("Timed out fetching %s", url)
            raise EventsLoadError(f"Timed out fetching {url}") from e
        except httpx.HTTPError as e:
            logger.warning("Network error fetching %s: %s", url, e)
            raise EventsLoadError(f"Network error fetching {url}: {e}") from e
        return response.text

    def _read_local(self, source: str) -> str:
        path = Path(source)
        logger.debug("Reading payload from %s", path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s: %s", path, e)
            raise EventsLoadError(f"Cannot read {path}: {e}") from e


def parse_records(payload: Any, model: type[ModelT]) -> list[ModelT]:
    """Validate a JSON array into models, skipping records that do not validate.

    Raises:
        EventsLoadError: If the payload is not a JSON array
    """
    if not isinstance(payload, list):
        raise EventsLoadError(f"Expected a JSON array, got {type(payload).__name__}")

    records: list[ModelT] = []
    for index, raw in enumerate(payload):
        try:
            records.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid %s record #%d: %s", model.__name__, index, e)
    return records


async def load_events(
    source: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[BaseEvent]:
    """Load event records in source order."""
    async with PayloadFetcher(timeout=timeout, shared_client=client) as fetcher:
        payload = await fetcher.fetch_json(source)
    events = parse_records(payload, BaseEvent)
    logger.info("Loaded %d event(s) from %s", len(events), source)
    return events


async def load_listings(
    source: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[DirectoryListing]:
    """Load directory listings in source order."""
    async with PayloadFetcher(timeout=timeout, shared_client=client) as fetcher:
        payload = await fetcher.fetch_json(source)
    listings = parse_records(payload, DirectoryListing)
    logger.info("Loaded %d listing(s) from %s", len(listings), source)
    return listings
