"""Song data access layer."""

from __future__ import annotations

from ..db.gateway import StorageGateway
from ..models import Song, SongPayload

_SONG_COLUMNS = "id, title, artist, release_date, text, link, group_name"


class SongRepository:
    """Repository issuing parameterized SQL against the ``songs`` table."""

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    async def list_songs(self, *, limit: int, offset: int) -> list[Song]:
        """List songs ordered by id with LIMIT/OFFSET pagination."""
        rows = await self._gateway.query(
            f"""
            SELECT {_SONG_COLUMNS}
            FROM songs
            ORDER BY id
            LIMIT $1 OFFSET $2
            """,
            limit,
            offset,
        )
        return [Song.from_row(r) for r in rows]

    async def get_text(self, song_id: int) -> tuple[bool, str | None]:
        """Return ``(found, text)`` for a song; ``text`` may be empty or NULL."""
        row = await self._gateway.query_one(
            "SELECT text FROM songs WHERE id = $1",
            song_id,
        )
        if row is None:
            return False, None
        return True, row["text"]

    async def create(self, payload: SongPayload) -> int:
        """Insert a song and return the identifier the store assigned."""
        return await self._gateway.query_scalar(
            """
            INSERT INTO songs (title, artist, release_date, text, link, group_name)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
            """,
            payload.title,
            payload.artist,
            payload.release_date,
            payload.text,
            payload.link,
            payload.group_name,
        )

    async def update(self, song_id: int, payload: SongPayload) -> int:
        """Overwrite every mutable column of a song; return rows affected."""
        return await self._gateway.execute(
            """
            UPDATE songs
            SET title = $1,
                artist = $2,
                release_date = $3,
                text = $4,
                link = $5,
                group_name = $6
            WHERE id = $7
            """,
            payload.title,
            payload.artist,
            payload.release_date,
            payload.text,
            payload.link,
            payload.group_name,
            song_id,
        )

    async def delete(self, song_id: int) -> int:
        """Delete a song; return rows affected."""
        return await self._gateway.execute(
            "DELETE FROM songs WHERE id = $1",
            song_id,
        )
