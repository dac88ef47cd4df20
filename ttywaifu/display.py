"""Terminal output: captions, the countdown bar and tag listings."""

from __future__ import annotations

import asyncio
import shutil
import sys
import textwrap
from collections.abc import Awaitable, Callable
from typing import TextIO

from colorama import Fore, Style
from tqdm import tqdm

from .config import COUNTDOWN_TICK_SECONDS
from .models import ImageRecord
from .tags import TagCatalog

FALLBACK_WIDTH = 80
MAX_BAR_WIDTH = 60
TAG_SEPARATOR = " • "


def terminal_width() -> int:
    return shutil.get_terminal_size(fallback=(FALLBACK_WIDTH, 24)).columns


def wrap_text(text: str, width: int) -> list[str]:
    """Greedy word wrap. Words longer than ``width`` stay on their own line unbroken."""
    return textwrap.wrap(text, width=max(width, 1), break_long_words=False, break_on_hyphens=False)


def format_caption(image: ImageRecord, width: int) -> list[str]:
    """Caption lines: separator, artist line, wrapped tag descriptions, separator."""
    separator = f"{Fore.LIGHTCYAN_EX}{'=' * width}{Style.RESET_ALL}"
    lines = ["", separator]

    if image.artist:
        artist_line = f"🎨 Artist: {Style.BRIGHT}{Fore.WHITE}{image.artist.name}{Style.RESET_ALL}"
        if image.artist.twitter:
            artist_line += f" | 🐦 {Fore.LIGHTCYAN_EX}{image.artist.twitter}{Style.RESET_ALL}"
    else:
        artist_line = f"🎨 Artist: {Fore.WHITE}Unknown{Style.RESET_ALL}"
    lines.append(artist_line)

    descriptions = TAG_SEPARATOR.join(tag.description.strip() for tag in image.tags if tag.description.strip())
    if descriptions:
        for line in wrap_text(f"🏷️  {descriptions}", width):
            lines.append(f"{Fore.YELLOW}{line}{Style.RESET_ALL}")

    lines.append(separator)
    lines.append("")
    return lines


def show_caption(image: ImageRecord, out: TextIO | None = None) -> None:
    print("\n".join(format_caption(image, terminal_width())), file=out or sys.stdout)


async def countdown(
    seconds: float,
    *,
    tick: float = COUNTDOWN_TICK_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    out: TextIO | None = None,
) -> int:
    """Fills a progress bar over ``seconds``, one step per ``tick``. Returns the number of ticks."""
    steps = max(1, round(seconds / tick))
    width = min(MAX_BAR_WIDTH, int(terminal_width() * 0.6))
    with tqdm(
        total=steps,
        ncols=width + 20,
        leave=False,
        file=out or sys.stdout,
        desc=f"{Fore.LIGHTCYAN_EX}⏳{Style.RESET_ALL}",
        bar_format="{desc} {bar} {remaining}",
        ascii="░▒█",
    ) as bar:
        for _ in range(steps):
            await sleep(tick)
            bar.update(1)
    return steps


def list_tags(catalog: TagCatalog, out: TextIO | None = None) -> None:
    """Prints both tag pools with usage hints."""
    out = out or sys.stdout
    print(f"\n{Style.BRIGHT}{Fore.LIGHTCYAN_EX}Available Tags:{Style.RESET_ALL}\n", file=out)

    print(f"{Style.BRIGHT}{Fore.GREEN}Safe Tags:{Style.RESET_ALL} {Fore.WHITE}(suitable for all audiences)", file=out)
    for tag in catalog.general:
        print(f"  {Fore.GREEN}•{Style.RESET_ALL} {tag}", file=out)

    print(f"\n{Style.BRIGHT}{Fore.LIGHTRED_EX}NSFW/Explicit Tags:{Style.RESET_ALL} {Fore.YELLOW}(18+ content only)", file=out)
    for tag in catalog.explicit:
        print(f"  {Fore.LIGHTRED_EX}•{Style.RESET_ALL} {tag} {Fore.LIGHTRED_EX}[EXPLICIT]{Style.RESET_ALL}", file=out)

    print(f"\n{Fore.YELLOW}Usage:{Style.RESET_ALL} --tags=tag1,tag2,tag3", file=out)
    print(f"{Fore.YELLOW}Example:{Style.RESET_ALL} --tags=maid,waifu,uniform", file=out)
    print(
        f"{Fore.YELLOW}NSFW Example:{Style.RESET_ALL} --tags=ecchi,oppai "
        f"{Fore.LIGHTRED_EX}(automatically enables --nsfw){Style.RESET_ALL}\n",
        file=out,
    )


def print_install_hint(renderer: str, out: TextIO | None = None) -> None:
    out = out or sys.stderr
    print(f"\n{Fore.RED}{renderer} is not installed or not in PATH{Style.RESET_ALL}", file=out)
    print("\nTo install jp2a:", file=out)
    print("  macOS: brew install jp2a", file=out)
    print("  Ubuntu/Debian: sudo apt-get install jp2a", file=out)
    print("  Arch: sudo pacman -S jp2a", file=out)
