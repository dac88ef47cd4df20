"""Image search client with bounded retries and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

import aiohttp
from aiohttp import ClientTimeout

from .config import BASE_BACKOFF_MS, MAX_BACKOFF_MS, SlideshowConfig
from .errors import ErrorKind, Failure
from .log import log_error, log_success, log_warning
from .models import ImageRecord
from .tags import DEFAULT_CATALOG, TagCatalog

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int) -> int:
    """Delay in milliseconds after a failed ``attempt`` (1-based): 1s, 2s, 4s, 8s, then 10s."""
    return min(BASE_BACKOFF_MS * 2 ** (attempt - 1), MAX_BACKOFF_MS)


def build_query(tags: list[str], min_height: int) -> list[tuple[str, str]]:
    """Query parameters: one ``included_tags`` per tag plus the height filter."""
    params = [("included_tags", tag) for tag in tags]
    params.append(("height", f">={min_height}"))
    return params


def parse_response(payload: object) -> ImageRecord | Failure:
    """Extracts the first image of a search response."""
    if not isinstance(payload, dict):
        return Failure(ErrorKind.MALFORMED_RESPONSE, "Response body is not a JSON object")
    images = payload.get("images")
    if not isinstance(images, list) or not images:
        return Failure(ErrorKind.MALFORMED_RESPONSE, "No image found in API response")
    try:
        return ImageRecord.from_api(images[0])
    except (TypeError, ValueError) as e:
        return Failure(ErrorKind.MALFORMED_RESPONSE, f"Unusable image entry: {e}")


class Fetcher:
    """Fetches one image record per call from the search API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: SlideshowConfig,
        catalog: TagCatalog = DEFAULT_CATALOG,
        *,
        sleep: SleepFunc = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.session = session
        self.config = config
        self.catalog = catalog
        self._sleep = sleep
        self._rng = rng

    def select_tags(self) -> list[str]:
        if self.config.custom_tags:
            logger.info(f"Using custom tags: {', '.join(self.config.custom_tags)}")
            return list(self.config.custom_tags)
        return [self.catalog.choose(self.config.include_nsfw, self._rng)]

    async def _attempt(self, params: list[tuple[str, str]]) -> ImageRecord | Failure:
        timeout = ClientTimeout(total=self.config.timeout_seconds)
        try:
            async with self.session.get(self.config.api_url, params=params, timeout=timeout) as response:
                logger.debug(f"Request URL: {response.url}")
                if not 200 <= response.status < 300:
                    return Failure(
                        ErrorKind.NETWORK_STATUS,
                        f"API request failed with status: {response.status}",
                        status=response.status,
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    return Failure(ErrorKind.MALFORMED_RESPONSE, f"Invalid JSON in API response: {e}")
        except asyncio.TimeoutError:
            return Failure(ErrorKind.NETWORK_TIMEOUT, f"API request timed out after {self.config.timeout}ms")
        except aiohttp.ClientError as e:
            return Failure(ErrorKind.NETWORK_ERROR, f"API request failed: {e}")
        return parse_response(payload)

    async def fetch_one(self) -> ImageRecord | Failure:
        """Returns the first matching image, or a Failure once every attempt is used up."""
        tags = self.select_tags()
        params = build_query(tags, self.config.min_height)
        max_retries = self.config.max_retries
        logger.info(f"Fetching waifu with tags: {', '.join(tags)}...")

        failure = Failure(ErrorKind.NETWORK_ERROR, "No attempt made")
        for attempt in range(1, max_retries + 1):
            result = await self._attempt(params)
            if isinstance(result, ImageRecord):
                log_success(logger, f"Successfully fetched image: {result.url}")
                return result

            failure = result
            log_warning(logger, f"Attempt {attempt}/{max_retries} failed: {failure.message}")
            if attempt < max_retries:
                delay = backoff_delay(attempt)
                logger.info(f"Retrying in {delay}ms...")
                await self._sleep(delay / 1000)

        log_error(logger, "All retry attempts failed")
        return Failure(failure.kind, failure.message, status=failure.status, attempts=max_retries)
