"""Colored logging for the slideshow.

Log output stays hidden unless verbose mode is on (``DEBUG=true`` or ``-v``),
so a normal session shows only the art, captions and the countdown.
"""

from __future__ import annotations

import logging
import os
import sys

from colorama import Back, Fore, Style, init

from .config import DEBUG_ENV_VAR

PACKAGE_LOGGER = "ttywaifu"
QUIET_LEVEL = logging.CRITICAL

init(autoreset=True)


class ColoredFormatter(logging.Formatter):
    """Custom logging formatter with colors."""
    COLORS = {
        "DEBUG": Fore.MAGENTA,
        "INFO": Fore.CYAN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formats the log record with appropriate colors."""
        log_fmt = (
            f"{Fore.LIGHTCYAN_EX}%(asctime)s{Style.RESET_ALL} - "
            f"{self.COLORS.get(record.levelname, Fore.WHITE)}%(levelname)s{Style.RESET_ALL} - %(message)s"
        )
        formatter = logging.Formatter(log_fmt, datefmt="%Y-%m-%d %H:%M:%S")
        return formatter.format(record)


def debug_enabled(environ: dict[str, str] | None = None) -> bool:
    """True when the environment toggle asks for verbose output."""
    value = (environ if environ is not None else os.environ).get(DEBUG_ENV_VAR, "")
    return value.strip().lower() == "true"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Attaches the colored handler to the package logger and sets its level."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.propagate = False
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter())
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else QUIET_LEVEL)

    # Silence noisy libraries
    for noisy in ("aiohttp", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


def log_success(logger: logging.Logger, text: str) -> None:
    """Logs a success message."""
    logger.info(f"{Fore.GREEN}✓ {text}{Style.RESET_ALL}")


def log_warning(logger: logging.Logger, text: str) -> None:
    logger.warning(f"{Fore.YELLOW}! {text}{Style.RESET_ALL}")


def log_error(logger: logging.Logger, text: str, exc_info: bool = False) -> None:
    logger.error(f"{Fore.RED}✗ {text}{Style.RESET_ALL}", exc_info=exc_info)


def print_error(text: str) -> None:
    """Prints an error that must be seen even when logging is quiet."""
    print(f"{Fore.RED}{Style.BRIGHT}✗ {text}{Style.RESET_ALL}", file=sys.stderr)
