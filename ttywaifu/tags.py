"""Fixed tag pools understood by the image API."""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class TagCatalog:
    """Two disjoint tag pools: ``general`` (all audiences) and ``explicit`` (18+)."""
    general: tuple[str, ...]
    explicit: tuple[str, ...]

    def __post_init__(self) -> None:
        overlap = set(self.general) & set(self.explicit)
        if overlap:
            raise ValueError(f"Tags cannot be both general and explicit: {', '.join(sorted(overlap))}")

    def pool(self, include_nsfw: bool) -> tuple[str, ...]:
        """Tags eligible for random selection."""
        return self.general + self.explicit if include_nsfw else self.general

    def is_explicit(self, tag: str) -> bool:
        return tag.strip().lower() in self.explicit

    def has_explicit(self, tags: Iterable[str]) -> bool:
        return any(self.is_explicit(tag) for tag in tags)

    def choose(self, include_nsfw: bool, rng: random.Random | None = None) -> str:
        """Picks one tag uniformly at random from the applicable pool."""
        return (rng or random).choice(self.pool(include_nsfw))


DEFAULT_CATALOG = TagCatalog(
    general=(
        "maid",
        "waifu",
        "marin-kitagawa",
        "mori-calliope",
        "raiden-shogun",
        "oppai",
        "selfies",
        "uniform",
        "kamisato-ayaka",
    ),
    explicit=(
        "ass",
        "hentai",
        "milf",
        "oral",
        "paizuri",
        "ecchi",
        "ero",
    ),
)
