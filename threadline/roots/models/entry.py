"""Log entry data model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Mention(BaseModel):
    """Reference from an entry to an identity, channel or blob."""

    link: str | None = None
    name: str | None = None

    model_config = ConfigDict(frozen=True, extra="allow")


class Content(BaseModel):
    """Entry payload.

    Only the fields the timeline looks at are declared; anything else the
    author put in the payload is kept as extra data.
    """

    type: str = Field(..., min_length=1)
    channel: str | None = None
    mentions: list[Mention] | None = None
    root: str | None = None

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("mentions", mode="before")
    @classmethod
    def drop_malformed_mentions(cls, v: Any) -> Any:
        """Keep mention objects only; a non-string link or name becomes None."""
        if not isinstance(v, (list, tuple)):
            return None
        mentions: list[Any] = []
        for item in v:
            if isinstance(item, Mention):
                mentions.append(item)
            elif isinstance(item, Mapping):
                mention = dict(item)
                for field in ("link", "name"):
                    if not isinstance(mention.get(field), str):
                        mention[field] = None
                mentions.append(mention)
        return mentions


class Entry(BaseModel):
    """Content-addressed record of the append-only log."""

    key: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    content: Content
    timestamp: float
    private: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def root_key(self) -> str:
        """Key of the thread root; the entry's own key when it starts a thread."""
        root = self.content.root
        if isinstance(root, str) and root:
            return root
        return self.key

    @property
    def is_root(self) -> bool:
        return self.root_key == self.key

    @property
    def type(self) -> str:
        return self.content.type
