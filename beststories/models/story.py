"""Story data models and the upstream item decoder."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# Wire format for postedAt, e.g. "2019-10-12 13:43:01"
POSTED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"


class HackerNewsItem(BaseModel):
    """Raw item as returned by the Hacker News item endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    by: str | None = None
    descendants: int = 0
    kids: list[int] | None = None
    score: int = 0
    time: int | None = None  # Unix epoch seconds
    title: str | None = None
    type: str | None = None
    url: str | None = None

    @field_validator("time")
    @classmethod
    def _check_time_in_range(cls, value: int | None) -> int | None:
        if value is not None:
            try:
                unix_to_local(value)
            except (OverflowError, OSError, ValueError) as e:
                raise ValueError(f"timestamp {value} is out of range") from e
        return value


class StoryDetail(BaseModel):
    """Normalized story record served to callers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    uri: str | None = None
    posted_by: str | None = None
    comment_count: int = 0
    score: int = 0
    posted_at: datetime | None = None

    @field_serializer("posted_at", when_used="json")
    def _format_posted_at(self, value: datetime | None) -> str | None:
        return value.strftime(POSTED_AT_FORMAT) if value is not None else None

    @classmethod
    def from_item(cls, item: HackerNewsItem) -> "StoryDetail":
        """Map upstream field names onto the normalized shape."""
        return cls(
            title=item.title,
            uri=item.url,
            posted_by=item.by,
            comment_count=item.descendants,
            score=item.score,
            posted_at=unix_to_local(item.time) if item.time is not None else None,
        )


def unix_to_local(timestamp: int) -> datetime:
    """Convert Unix epoch seconds to a naive datetime in local time."""
    return datetime.fromtimestamp(timestamp)


def decode_story(payload: Any) -> StoryDetail:
    """Decode a raw item payload into a StoryDetail.

    Raises pydantic.ValidationError for payloads that are not an item
    object (including the ``null`` the upstream returns for unknown ids).
    """
    return StoryDetail.from_item(HackerNewsItem.model_validate(payload))
