"""The fetch, render and wait loop."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum, auto
from pathlib import Path

import aiohttp

from .config import FETCH_COOLDOWN_SECONDS, SlideshowConfig
from .display import countdown, show_caption
from .downloader import download
from .errors import Failure
from .fetcher import Fetcher
from .log import log_error, log_warning
from .models import ImageRecord
from .persister import SaveOutcome, create_directory, save
from .renderer import render
from .tags import DEFAULT_CATALOG, TagCatalog

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = auto()
    FETCHING = auto()
    DOWNLOADING = auto()
    RENDERING = auto()
    CAPTIONING = auto()
    SAVING = auto()
    WAITING = auto()


class Slideshow:
    """Runs one image at a time through fetch, download, render, caption, save and wait.

    Collaborators can be swapped out; by default they are the module-level
    functions of this package.
    """

    def __init__(
        self,
        config: SlideshowConfig,
        session: aiohttp.ClientSession,
        *,
        catalog: TagCatalog = DEFAULT_CATALOG,
        fetcher: Fetcher | None = None,
        downloader: Callable[[aiohttp.ClientSession, str, int], Awaitable[bytes | Failure]] = download,
        renderer: Callable[[bytes, SlideshowConfig], Awaitable[Failure | None]] = render,
        saver: Callable[[bytes, str, Path], Awaitable[SaveOutcome | Failure]] = save,
        captioner: Callable[[ImageRecord], None] = show_caption,
        waiter: Callable[[float], Awaitable[object]] = countdown,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.session = session
        self.fetcher = fetcher or Fetcher(session, config, catalog)
        self._download = downloader
        self._render = renderer
        self._save = saver
        self._caption = captioner
        self._wait = waiter
        self._sleep = sleep
        self.phase = Phase.IDLE
        self.shown = 0

    async def _cooldown(self) -> None:
        await self._sleep(FETCH_COOLDOWN_SECONDS)

    async def step(self) -> Failure | None:
        """One full iteration, including the wait or cooldown that ends it."""
        self.phase = Phase.FETCHING
        image = await self.fetcher.fetch_one()
        if isinstance(image, Failure):
            log_warning(logger, f"Failed to fetch image ({image}), retrying in {FETCH_COOLDOWN_SECONDS:.0f} seconds...")
            await self._cooldown()
            return image

        self.phase = Phase.DOWNLOADING
        data = await self._download(self.session, image.url, self.config.timeout)
        if isinstance(data, Failure):
            return await self._unexpected(data)

        self.phase = Phase.RENDERING
        failure = await self._render(data, self.config)
        if failure is not None:
            return await self._unexpected(failure)
        self.shown += 1

        if self.config.caption:
            self.phase = Phase.CAPTIONING
            self._caption(image)

        if not self.config.no_save:
            self.phase = Phase.SAVING
            outcome = await self._save(data, image.url, self.config.output_dir)
            if isinstance(outcome, Failure):
                log_warning(logger, f"Could not save image, continuing: {outcome}")

        self.phase = Phase.WAITING
        await self._wait(self.config.interval_seconds)
        return None

    async def _unexpected(self, failure: Failure) -> Failure:
        log_error(logger, f"Unexpected error in main loop: {failure}")
        await self._cooldown()
        return failure

    async def run(self, max_iterations: int | None = None) -> bool:
        """Loops until interrupted (or ``max_iterations`` is reached).

        Returns False without starting when the output directory cannot be created.
        """
        logger.info("Starting TTY Waifu...")
        logger.info(f"Configuration: {json.dumps(self.config.describe(), indent=2)}")

        if not create_directory(self.config.output_dir):
            return False

        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            iterations += 1
            try:
                await self.step()
            except Exception:
                log_error(logger, "Unexpected error in main loop", exc_info=True)
                await self._cooldown()
        self.phase = Phase.IDLE
        return True
