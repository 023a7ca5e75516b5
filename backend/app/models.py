from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Domain Models - Song catalogue entities
# ============================================================================


class SongFields(BaseModel):
    """Mutable song attributes shared by payloads and stored rows.

    Accepts camelCase (``releaseDate``) or snake_case (``release_date``) keys;
    FastAPI serializes responses by alias, so clients always see camelCase.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    artist: str
    release_date: str = Field(alias="releaseDate")
    text: str
    link: str
    group_name: str | None = Field(None, alias="groupName")


class SongPayload(SongFields):
    """Client-supplied song for create and update; all but group name required.

    Required fields must be non-empty; whitespace-only strings are accepted
    and stored as sent.

    Whether the client sent ``groupName`` at all is visible in
    ``model_fields_set``; absent and ``null`` both store NULL.
    """

    title: str = Field(..., min_length=1)
    artist: str = Field(..., min_length=1)
    release_date: str = Field(..., min_length=1, alias="releaseDate")
    text: str = Field(..., min_length=1)
    link: str = Field(..., min_length=1)


class Song(SongFields):
    """Persisted song row including its storage-assigned identifier."""

    id: int

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Song":
        """Build a Song from a ``songs`` table row keyed by column name."""
        return cls.model_validate(row)


class MessageResponse(BaseModel):
    """Plain success envelope for mutations without a body."""

    message: str
