"""Pydantic models describing catalog entries and their remote metadata."""

from __future__ import annotations

import re
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Platform = Literal["douban", "imdb", "ign"]

PLATFORM_ORDER: tuple[Platform, ...] = ("douban", "imdb", "ign")
# Platforms consulted, in order, when an entry has no cover of its own.
COVER_PRIORITY: tuple[Platform, ...] = ("imdb", "ign", "douban")

_CREATOR_SEPARATORS = re.compile(r"[,，\n]")
# Declared optional fields that are left out of payloads when unset.
_OPTIONAL_KEYS = ("personalRating", "coverImage")


class HotComment(BaseModel):
    """A highlighted comment or review snippet scraped from a platform."""

    author: str | None = None
    votes: int | None = None
    content: str

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class RemoteMetadata(BaseModel):
    """Normalized rating data for one platform, or the reason it is missing."""

    model_config = ConfigDict(populate_by_name=True)

    source: Platform
    rating: float | None = None
    scale: float = 10
    votes: int | None = None
    hot_comments: list[HotComment] = Field(default_factory=list, alias="hotComments")
    summary: str | None = None
    cover_image: str | None = Field(default=None, alias="coverImage")
    error: str | None = None

    @model_validator(mode="after")
    def _error_excludes_data(self) -> "RemoteMetadata":
        if self.error is None:
            return self
        if (
            self.rating is not None
            or self.votes is not None
            or self.hot_comments
            or self.summary is not None
            or self.cover_image is not None
        ):
            raise ValueError("Remote metadata cannot carry both an error and data")
        return self

    @classmethod
    def failure(cls, source: Platform, message: str) -> "RemoteMetadata":
        """Return an error-shaped record for ``source``."""

        return cls(source=source, error=message or "unknown error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON shape served to the browser."""

        if self.error is not None:
            return {"source": self.source, "error": self.error}
        payload = self.model_dump(by_alias=True, exclude={"error", "hot_comments"})
        payload["hotComments"] = [comment.to_payload() for comment in self.hot_comments]
        return payload


class CatalogEntry(BaseModel):
    """A media item as stored in the catalog file.

    Unknown fields are kept so they can be echoed back untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    title: str = ""
    creators: list[str] = Field(default_factory=list)
    summary: str = ""
    personal_rating: float | None = Field(
        default=None, alias="personalRating", ge=0, le=10
    )
    personal_review: str = Field(default="", alias="personalReview")
    cover_image: str | None = Field(default=None, alias="coverImage")
    links: dict[str, str] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _numeric_id(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", "summary", "personal_review", mode="before")
    @classmethod
    def _null_text(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("creators", mode="before")
    @classmethod
    def _split_creators(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            parts = _CREATOR_SEPARATORS.split(value)
        elif isinstance(value, (list, tuple)):
            parts = [str(part) for part in value]
        else:
            raise TypeError("creators must be a string or a list of strings")
        return [part.strip() for part in parts if part.strip()]

    @field_validator("personal_rating", mode="before")
    @classmethod
    def _blank_rating(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cover_image", mode="before")
    @classmethod
    def _blank_cover(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("links", mode="before")
    @classmethod
    def _sanitize_links(cls, value: object) -> dict[str, str]:
        """Keep only supported platforms with non-blank URLs."""

        if not isinstance(value, Mapping):
            return {}
        links: dict[str, str] = {}
        for platform in PLATFORM_ORDER:
            link = value.get(platform)
            if isinstance(link, str) and link.strip():
                links[platform] = link.strip()
        return links

    def to_payload(self) -> dict[str, object]:
        return _drop_unset_optionals(self.model_dump(by_alias=True))


class EnrichedEntry(CatalogEntry):
    """A catalog entry merged with metadata from its linked platforms."""

    remote: dict[str, RemoteMetadata] = Field(default_factory=dict)

    @classmethod
    def from_entry(
        cls,
        entry: CatalogEntry,
        remote: Mapping[str, RemoteMetadata],
        cover_image: str | None,
    ) -> "EnrichedEntry":
        data: dict[str, Any] = entry.model_dump(by_alias=True)
        data["remote"] = dict(remote)
        data["coverImage"] = cover_image
        return cls.model_validate(data)

    def to_payload(self) -> dict[str, object]:
        payload = _drop_unset_optionals(
            self.model_dump(by_alias=True, exclude={"remote"})
        )
        payload["remote"] = {
            platform: metadata.to_payload() for platform, metadata in self.remote.items()
        }
        payload["coverImage"] = self.cover_image
        return payload


def _drop_unset_optionals(payload: dict[str, Any]) -> dict[str, Any]:
    # Extra fields are echoed as stored, nulls included.
    for key in _OPTIONAL_KEYS:
        if payload.get(key) is None:
            payload.pop(key, None)
    return payload
