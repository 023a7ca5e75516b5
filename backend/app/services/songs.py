"""Business logic for the songs catalogue."""

from __future__ import annotations

from ..config import settings
from ..db.gateway import StorageGateway
from ..models import Song, SongPayload
from ..repositories.songs import SongRepository
from ..utils.logging import get_logger
from ..utils.metrics import record_mutation
from .lyrics import VerseSequence
from .pagination import paginate, resolve_window

logger = get_logger(__name__)


class SongNotFoundError(LookupError):
    """Raised when no song row matches the requested id."""


class SongTextMissingError(LookupError):
    """Raised when a song exists but has no lyric text."""


class SongService:
    """Service layer for song listing, lyrics paging and mutations."""

    def __init__(
        self,
        gateway: StorageGateway,
        repository: SongRepository | None = None,
        *,
        default_limit: int | None = None,
    ) -> None:
        self._repo = repository or SongRepository(gateway)
        self._default_limit = default_limit or settings.PAGE_DEFAULT_LIMIT

    async def list_songs(self, *, page: int | None, limit: int | None) -> list[Song]:
        """Return one page of songs ordered by id."""
        window = resolve_window(page, limit, default_limit=self._default_limit)
        return await self._repo.list_songs(limit=window.limit, offset=window.offset)

    async def get_verses(self, song_id: int, *, page: int | None, limit: int | None) -> list[str]:
        """Return one page of a song's verses.

        Raises:
            SongNotFoundError: If the song does not exist.
            SongTextMissingError: If the song's text is empty.
        """
        found, text = await self._repo.get_text(song_id)
        if not found:
            raise SongNotFoundError(song_id)
        if not text:
            raise SongTextMissingError(song_id)

        window = resolve_window(page, limit, default_limit=self._default_limit)
        return paginate(VerseSequence(text), window)

    async def create_song(self, payload: SongPayload) -> Song:
        """Insert a song and return it with the assigned id."""
        logger.info("song_create_requested", extra={"title": payload.title})
        song_id = await self._repo.create(payload)
        logger.info("song_created", extra={"song_id": song_id})
        record_mutation("create")
        return Song(id=song_id, **payload.model_dump())

    async def update_song(self, song_id: int, payload: SongPayload) -> None:
        """Overwrite a song's fields.

        Raises:
            SongNotFoundError: If no row was updated.
        """
        if await self._repo.update(song_id, payload) == 0:
            raise SongNotFoundError(song_id)
        logger.info("song_updated", extra={"song_id": song_id})
        record_mutation("update")

    async def delete_song(self, song_id: int) -> None:
        """Delete a song.

        Raises:
            SongNotFoundError: If no row was deleted.
        """
        if await self._repo.delete(song_id) == 0:
            raise SongNotFoundError(song_id)
        logger.info("song_deleted", extra={"song_id": song_id})
        record_mutation("delete")
