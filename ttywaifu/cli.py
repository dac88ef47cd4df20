"""Command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from collections.abc import Sequence

import aiohttp
from colorama import Fore, Style

from . import __version__
from .config import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RENDERER,
    DEFAULT_TIMEOUT_MS,
    SlideshowConfig,
    parse_tags,
    resolve_config,
)
from .display import list_tags, print_install_hint
from .log import debug_enabled, print_error, setup_logging
from .renderer import renderer_available
from .slideshow import Slideshow
from .tags import DEFAULT_CATALOG, TagCatalog

USER_AGENT = f"tty-waifu/{__version__}"

EPILOG = f"""
{Style.BRIGHT}{Fore.LIGHTCYAN_EX}Examples:{Style.RESET_ALL}
  ttywaifu {Fore.GREEN}--colors --caption{Style.RESET_ALL}
  ttywaifu {Fore.GREEN}--nsfw --interval 5{Style.RESET_ALL}
  ttywaifu {Fore.GREEN}--tags maid,uniform --caption{Style.RESET_ALL}

{Style.BRIGHT}{Fore.LIGHTCYAN_EX}Environment Variables:{Style.RESET_ALL}
  {Fore.GREEN}DEBUG=true{Style.RESET_ALL}        Enable all logging output {Fore.YELLOW}(INFO, WARNING, ERROR, DEBUG){Style.RESET_ALL}
                    {Fore.LIGHTRED_EX}Without DEBUG=true, only the art, captions and progress bar are shown{Style.RESET_ALL}
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ttywaifu",
        description=(
            f"{Style.BRIGHT}{Fore.LIGHTCYAN_EX}TTY Waifu{Style.RESET_ALL} - Terminal Waifu Slideshow Viewer\n"
            f"{Fore.YELLOW}Fetches images from the Waifu API and displays them using jp2a.{Style.RESET_ALL}"
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--nsfw", action="store_true", help="Include NSFW tags (default: false)")
    parser.add_argument("--interval", type=int, default=DEFAULT_INTERVAL_SECONDS, metavar="N",
                        help=f"Seconds between images (default: {DEFAULT_INTERVAL_SECONDS})")
    parser.add_argument("--dir", dest="output_dir", default=str(DEFAULT_OUTPUT_DIR), metavar="DIR",
                        help=f"Output directory for saved images (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--no-save", action="store_true", help="Do not save images to disk")
    parser.add_argument("--tags", metavar="TAG1,TAG2",
                        help="Fetch only images with these tags (e.g. --tags maid,waifu,uniform)")
    parser.add_argument("--colors", action="store_true", help="Display image in color (requires jp2a)")
    parser.add_argument("--fill", action="store_true", help="Fill the terminal with the image (requires jp2a)")
    parser.add_argument("--caption", action="store_true", help="Display caption with artist info and tags")
    parser.add_argument("--list-tags", action="store_true", help="Show all available tags and exit")
    parser.add_argument("--retries", type=int, default=DEFAULT_MAX_RETRIES, metavar="N",
                        help=f"API attempts per image (default: {DEFAULT_MAX_RETRIES})")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT_MS, metavar="MS",
                        help=f"Network timeout in milliseconds (default: {DEFAULT_TIMEOUT_MS})")
    parser.add_argument("--renderer", default=DEFAULT_RENDERER, metavar="PATH",
                        help=f"ASCII-art converter to run (default: {DEFAULT_RENDERER})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable logging output (same as DEBUG=true)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace, catalog: TagCatalog = DEFAULT_CATALOG) -> SlideshowConfig:
    return resolve_config(
        include_nsfw=args.nsfw,
        interval_seconds=args.interval,
        output_dir=args.output_dir,
        colors=args.colors,
        fill=args.fill,
        caption=args.caption,
        max_retries=args.retries,
        timeout=args.timeout,
        no_save=args.no_save,
        custom_tags=parse_tags(args.tags),
        renderer=args.renderer,
        catalog=catalog,
    )


def install_signal_handlers() -> None:
    """Ctrl+C and SIGTERM end the process right away, mid-countdown included."""
    def signal_handler(sig, frame):
        print(f"\n{Fore.YELLOW}Received {signal.Signals(sig).name}, exiting.{Style.RESET_ALL}")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def run_slideshow(config: SlideshowConfig) -> bool:
    async with aiohttp.ClientSession(headers={"User-Agent": USER_AGENT}) as session:
        return await Slideshow(config, session).run()


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose or debug_enabled())

    if args.list_tags:
        list_tags(DEFAULT_CATALOG)
        sys.exit(0)

    if not renderer_available(args.renderer):
        print_install_hint(args.renderer)
        sys.exit(1)

    try:
        config = config_from_args(args)
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        sys.exit(1)

    install_signal_handlers()
    try:
        started = asyncio.run(run_slideshow(config))
    except Exception as e:
        print_error(f"Fatal error during startup: {e}")
        sys.exit(1)

    if not started:
        print_error(f"Failed to create output directory: {config.output_dir}")
        sys.exit(1)


if __name__ == "__main__":
    main()
