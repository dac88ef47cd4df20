"""Saving downloaded images into the output directory."""

from __future__ import annotations

import logging
import time
from enum import Enum, auto
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiofiles

from .errors import ErrorKind, Failure
from .log import log_error, log_success

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "waifu-"
FALLBACK_SUFFIX = ".jpg"


class SaveOutcome(Enum):
    SAVED = auto()
    ALREADY_EXISTS = auto()


def create_directory(path: Path) -> bool:
    """Creates a directory (and its parents) if it doesn't exist. Returns True on success."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        log_error(logger, f"Failed to create output directory {path}: {e}")
        return False


def filename_from_url(url: str, now: float | None = None) -> str:
    """Last segment of the decoded URL path, or a timestamped name when it is empty or unusable."""
    name = unquote(urlparse(url).path).rsplit("/", 1)[-1]
    if name and name not in (".", "..") and "\\" not in name:
        return name
    millis = int((time.time() if now is None else now) * 1000)
    return f"{FALLBACK_PREFIX}{millis}{FALLBACK_SUFFIX}"


async def save(data: bytes, url: str, output_dir: Path) -> SaveOutcome | Failure:
    """Writes ``data`` under ``output_dir`` unless a file of that name is already there."""
    save_path = output_dir / filename_from_url(url)
    if save_path.exists():
        logger.debug(f"Image already exists: {save_path}")
        return SaveOutcome.ALREADY_EXISTS

    try:
        # "x" mode refuses to clobber a file created since the check above.
        async with aiofiles.open(save_path, "xb") as handle:
            await handle.write(data)
    except FileExistsError:
        logger.debug(f"Image already exists: {save_path}")
        return SaveOutcome.ALREADY_EXISTS
    except OSError as e:
        return Failure(ErrorKind.FILESYSTEM_ERROR, f"Could not save {save_path}: {e}")

    log_success(logger, f"Saved image: {save_path}")
    return SaveOutcome.SAVED
