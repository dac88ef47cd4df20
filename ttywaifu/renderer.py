"""Runs the external ASCII-art converter on an image buffer."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import SlideshowConfig
from .errors import ErrorKind, Failure

logger = logging.getLogger(__name__)

BASE_FLAGS: tuple[str, ...] = ("-c", "-b")
TEMP_PREFIX = "waifu-"
TEMP_SUFFIX = ".jpg"


def renderer_available(renderer: str) -> bool:
    return shutil.which(renderer) is not None


def build_renderer_args(config: SlideshowConfig, image_path: Path) -> list[str]:
    """Flags for the converter, image path last."""
    args = list(BASE_FLAGS)
    if config.colors:
        args.append("--colors")
    if config.fill:
        args.append("--fill")
    args.append(str(image_path))
    return args


@contextmanager
def temporary_image(data: bytes) -> Iterator[Path]:
    """Writes ``data`` to a fresh temp file and removes it on exit, whatever happens."""
    fd, name = tempfile.mkstemp(suffix=TEMP_SUFFIX, prefix=TEMP_PREFIX)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        yield path
    finally:
        try:
            path.unlink()
        except OSError as e:
            logger.debug(f"Could not remove temp file {path}: {e}")


async def render(data: bytes, config: SlideshowConfig) -> Failure | None:
    """Draws the image in the terminal. Returns None on success.

    The converter's stdout goes straight to the terminal; stderr is kept for
    the failure message. There is no timeout on the converter process.
    """
    try:
        with temporary_image(data) as image_path:
            args = build_renderer_args(config, image_path)
            logger.debug(f"{config.renderer} command: {config.renderer} {' '.join(args)}")
            try:
                process = await asyncio.create_subprocess_exec(
                    config.renderer,
                    *args,
                    stdout=None,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError:
                return Failure(ErrorKind.RENDERER_MISSING, f"{config.renderer} not found in PATH")
            except OSError as e:
                return Failure(ErrorKind.RENDERER_MISSING, f"Cannot execute {config.renderer}: {e}")

            try:
                _, stderr = await process.communicate()
            except asyncio.CancelledError:
                if process.returncode is None:
                    process.kill()
                await process.wait()
                raise
            if process.returncode != 0:
                error_text = stderr.decode("utf-8", errors="replace").strip()
                return Failure(
                    ErrorKind.RENDERER_EXIT_NONZERO,
                    f"{config.renderer} failed: {error_text}",
                    status=process.returncode,
                )
    except OSError as e:
        return Failure(ErrorKind.FILESYSTEM_ERROR, f"Could not write temp image: {e}")
    return None
