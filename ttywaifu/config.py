# config.py

"""Runtime configuration for the slideshow.
-----------------------------------------
Holds the fixed constants of the application and the frozen
``SlideshowConfig`` value object that every component reads from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .tags import DEFAULT_CATALOG, TagCatalog

logger = logging.getLogger(__name__)

# --- Constants ---
API_URL: str = "https://api.waifu.im/search"
DEFAULT_OUTPUT_DIR: Path = Path("./waifus")
DEFAULT_INTERVAL_SECONDS: int = 10
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_TIMEOUT_MS: int = 30_000
DEFAULT_MIN_HEIGHT: int = 2000
DEFAULT_RENDERER: str = "jp2a"

BASE_BACKOFF_MS: int = 1000
MAX_BACKOFF_MS: int = 10_000
FETCH_COOLDOWN_SECONDS: float = 5.0
COUNTDOWN_TICK_SECONDS: float = 0.1
DEBUG_ENV_VAR: str = "DEBUG"


@dataclass(frozen=True)
class SlideshowConfig:
    """Settings fixed at startup and shared read-only by all components."""
    include_nsfw: bool = False
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    output_dir: Path = DEFAULT_OUTPUT_DIR
    colors: bool = False
    fill: bool = False
    caption: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: int = DEFAULT_TIMEOUT_MS  # milliseconds
    no_save: bool = False
    custom_tags: tuple[str, ...] | None = None
    renderer: str = DEFAULT_RENDERER
    api_url: str = API_URL
    min_height: int = DEFAULT_MIN_HEIGHT

    def __post_init__(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {self.interval_seconds}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.custom_tags is not None and not self.custom_tags:
            # An empty tag list means "no preference"; normalise it away.
            object.__setattr__(self, "custom_tags", None)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    def describe(self) -> dict[str, object]:
        """Plain mapping of the settings, for debug logging."""
        return {
            "include_nsfw": self.include_nsfw,
            "interval_seconds": self.interval_seconds,
            "output_dir": str(self.output_dir),
            "colors": self.colors,
            "fill": self.fill,
            "caption": self.caption,
            "max_retries": self.max_retries,
            "timeout": self.timeout,
            "no_save": self.no_save,
            "custom_tags": list(self.custom_tags) if self.custom_tags else None,
            "renderer": self.renderer,
            "api_url": self.api_url,
            "min_height": self.min_height,
        }


def parse_tags(raw: str | None) -> tuple[str, ...] | None:
    """Splits a comma-separated tag list, dropping blanks. Returns None when nothing is left."""
    if not raw:
        return None
    tags = tuple(tag.strip() for tag in raw.split(",") if tag.strip())
    return tags or None


def resolve_config(
    *,
    include_nsfw: bool = False,
    interval_seconds: int | None = None,
    output_dir: Path | str | None = None,
    colors: bool = False,
    fill: bool = False,
    caption: bool = False,
    max_retries: int = DEFAULT_MAX_RETRIES,
    timeout: int = DEFAULT_TIMEOUT_MS,
    no_save: bool = False,
    custom_tags: Iterable[str] | None = None,
    renderer: str = DEFAULT_RENDERER,
    api_url: str = API_URL,
    catalog: TagCatalog = DEFAULT_CATALOG,
) -> SlideshowConfig:
    """Builds the effective configuration from raw user choices.

    A non-positive interval is ignored in favour of the default. Requesting
    any explicit tag switches NSFW inclusion on, whatever ``include_nsfw`` said.
    """
    interval = DEFAULT_INTERVAL_SECONDS
    if interval_seconds is not None:
        if interval_seconds > 0:
            interval = interval_seconds
        else:
            logger.warning(f"Ignoring non-positive interval {interval_seconds}, using {DEFAULT_INTERVAL_SECONDS}s")

    tags = tuple(custom_tags) if custom_tags else None
    if tags and catalog.has_explicit(tags):
        if not include_nsfw:
            logger.info("Explicit tag requested, enabling NSFW mode")
        include_nsfw = True

    return SlideshowConfig(
        include_nsfw=include_nsfw,
        interval_seconds=interval,
        output_dir=Path(output_dir) if output_dir is not None else DEFAULT_OUTPUT_DIR,
        colors=colors,
        fill=fill,
        caption=caption,
        max_retries=max_retries,
        timeout=timeout,
        no_save=no_save,
        custom_tags=tags,
        renderer=renderer,
        api_url=api_url,
    )
