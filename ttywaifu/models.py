"""Image metadata as delivered by the search API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Artist:
    name: str
    artist_id: int | None = None
    twitter: str | None = None
    pixiv: str | None = None
    patreon: str | None = None
    deviant_art: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Artist:
        return cls(
            name=str(data.get("name") or "Unknown"),
            artist_id=data.get("artist_id"),
            twitter=data.get("twitter") or None,
            pixiv=data.get("pixiv") or None,
            patreon=data.get("patreon") or None,
            deviant_art=data.get("deviant_art") or None,
        )


@dataclass(frozen=True)
class ImageTag:
    name: str
    description: str = ""
    is_nsfw: bool = False
    tag_id: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ImageTag:
        return cls(
            name=str(data.get("name", "")),
            description=str(data.get("description") or ""),
            is_nsfw=bool(data.get("is_nsfw", False)),
            tag_id=data.get("tag_id"),
        )


@dataclass(frozen=True)
class ImageRecord:
    """One image entry. Immutable once parsed."""
    url: str
    image_id: int | None = None
    byte_size: int = 0
    width: int = 0
    height: int = 0
    is_nsfw: bool = False
    extension: str = ""
    source: str | None = None
    dominant_color: str | None = None
    preview_url: str | None = None
    artist: Artist | None = None
    tags: tuple[ImageTag, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ImageRecord:
        """Parses one element of the ``images`` array.

        Raises ValueError if the entry is not an object or has no ``url``.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Image entry is not an object: {type(data).__name__}")
        url = data.get("url")
        if not url or not isinstance(url, str):
            raise ValueError("Image entry has no url")

        artist_data = data.get("artist")
        tags_data = data.get("tags") or []
        return cls(
            url=url,
            image_id=data.get("image_id"),
            byte_size=int(data.get("byte_size") or 0),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            is_nsfw=bool(data.get("is_nsfw", False)),
            extension=str(data.get("extension") or ""),
            source=data.get("source") or None,
            dominant_color=data.get("dominant_color") or None,
            preview_url=data.get("preview_url") or None,
            artist=Artist.from_api(artist_data) if isinstance(artist_data, dict) else None,
            tags=tuple(ImageTag.from_api(tag) for tag in tags_data if isinstance(tag, dict)),
        )

    @property
    def size_mb(self) -> float:
        return self.byte_size / 1024 / 1024
