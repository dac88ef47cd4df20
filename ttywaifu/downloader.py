"""Single-shot image download."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from aiohttp import ClientTimeout

from .errors import ErrorKind, Failure

logger = logging.getLogger(__name__)


async def download(session: aiohttp.ClientSession, url: str, timeout: int) -> bytes | Failure:
    """Fetches ``url`` in one attempt bounded by ``timeout`` milliseconds.

    Retrying is left to the caller.
    """
    try:
        async with session.get(url, timeout=ClientTimeout(total=timeout / 1000)) as response:
            if not 200 <= response.status < 300:
                return Failure(
                    ErrorKind.NETWORK_STATUS,
                    f"Failed to download image: {response.status}",
                    status=response.status,
                )
            data = await response.read()
    except asyncio.TimeoutError:
        return Failure(ErrorKind.NETWORK_TIMEOUT, f"Download of {url} timed out after {timeout}ms")
    except aiohttp.ClientError as e:
        return Failure(ErrorKind.NETWORK_ERROR, f"Failed to download image: {e}")

    logger.info(f"Downloaded image: {len(data) / 1024 / 1024:.2f}MB")
    return data
