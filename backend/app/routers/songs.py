"""
Songs catalogue router.

Provides REST endpoints over the ``songs`` table:
- Paginated song listing
- Paginated verses of a song's lyrics
- Create, update and delete

Pagination: ``page`` is 1-based, ``limit`` is the page size. Missing or
non-positive values fall back to page 1 and the default page size (10); the
same policy applies to songs and to verses. A blank value (``?page=``) counts
as missing. Ids, pages and limits above 2**31 - 1 are rejected with 400.

Example Usage:
    ```bash
    # Second page of five songs
    curl "http://localhost:8080/songs?page=2&limit=5"

    # First two verses of song 7
    curl "http://localhost:8080/songs/7/text?page=1&limit=2"

    # Create a song
    curl -X POST http://localhost:8080/songs \\
      -H 'Content-Type: application/json' \\
      -d '{"title":"T","artist":"A","releaseDate":"2022-01-01","text":"L1\\n\\nL2","link":"x.com"}'
    ```
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BeforeValidator

from ..db.gateway import StorageGateway
from ..db.postgres_async import get_gateway
from ..models import MessageResponse, Song, SongPayload
from ..services.songs import SongNotFoundError, SongService, SongTextMissingError

router = APIRouter(prefix="/songs", tags=["songs"])

# Ids are SERIAL (int4); page and limit share the bound so OFFSET stays in int8.
PG_INT_MAX = 2**31 - 1


def _blank_as_missing(value: Any) -> Any:
    return None if value == "" else value


SongId = Annotated[int, Path(ge=-PG_INT_MAX - 1, le=PG_INT_MAX)]
Page = Annotated[
    int | None,
    BeforeValidator(_blank_as_missing),
    Query(le=PG_INT_MAX, description="1-based page number"),
]
Limit = Annotated[
    int | None,
    BeforeValidator(_blank_as_missing),
    Query(le=PG_INT_MAX, description="Page size (default 10)"),
]


def get_song_service(gateway: StorageGateway = Depends(get_gateway)) -> SongService:
    """Dependency provider for SongService."""
    return SongService(gateway)


@router.get("", response_model=list[Song])
async def list_songs(
    page: Page = None,
    limit: Limit = None,
    service: SongService = Depends(get_song_service),
) -> list[Song]:
    """
    List songs ordered by id.

    An empty page is a 200 with ``[]``; this endpoint never returns 404.

    Args:
        page: Page number; values <= 0 mean page 1
        limit: Page size; values <= 0 mean the default
        service: SongService dependency (injected)

    Returns:
        Songs on the requested page, ascending by id
    """
    return await service.list_songs(page=page, limit=limit)


@router.get("/{song_id}/text", response_model=list[str])
async def get_song_text(
    song_id: SongId,
    page: Page = None,
    limit: Limit = None,
    service: SongService = Depends(get_song_service),
) -> list[str]:
    """
    Return one page of a song's verses.

    Verses are separated by a blank line in the stored text. A page past the
    last verse is a 200 with ``[]``.

    Raises:
        HTTPException: 404 if the song does not exist or has no text
    """
    try:
        return await service.get_verses(song_id, page=page, limit=limit)
    except SongNotFoundError:
        raise HTTPException(status_code=404, detail="Song not found") from None
    except SongTextMissingError:
        raise HTTPException(status_code=404, detail="No text found for this song") from None


@router.post("", response_model=Song, status_code=status.HTTP_201_CREATED)
async def create_song(
    payload: SongPayload,
    service: SongService = Depends(get_song_service),
) -> Song:
    """
    Create a song.

    ``title``, ``artist``, ``releaseDate``, ``text`` and ``link`` are
    required and non-empty; ``groupName`` is optional.

    Returns:
        The created song including its assigned ``id``
    """
    return await service.create_song(payload)


@router.put("/{song_id}", response_model=MessageResponse)
async def update_song(
    song_id: SongId,
    payload: SongPayload,
    service: SongService = Depends(get_song_service),
) -> MessageResponse:
    """
    Replace every field of a song.

    Raises:
        HTTPException: 404 if the song does not exist
    """
    try:
        await service.update_song(song_id, payload)
    except SongNotFoundError:
        raise HTTPException(status_code=404, detail="Song not found") from None
    return MessageResponse(message="Song updated successfully")


@router.delete("/{song_id}", response_model=MessageResponse)
async def delete_song(
    song_id: SongId,
    service: SongService = Depends(get_song_service),
) -> MessageResponse:
    """
    Delete a song.

    Raises:
        HTTPException: 404 if the song does not exist
    """
    try:
        await service.delete_song(song_id)
    except SongNotFoundError:
        raise HTTPException(status_code=404, detail="Song not found") from None
    return MessageResponse(message="Song deleted successfully")
