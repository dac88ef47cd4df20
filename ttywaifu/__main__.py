"""Allows ``python -m ttywaifu``."""

from .cli import main

main()
