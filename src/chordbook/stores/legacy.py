"""Adapter from raw store documents to :class:`~chordbook.models.Song`.

Older revisions of the catalog stored sections as a list of row objects::

    chords: [{"section": "Intro", "content": "C G"}, {"section": "Verse", ...}]

The current shape is a name → content map plus an order array
(``sectionOrder`` for chords, ``lyricsOrder`` for lyrics).  Every record read
from a store passes through :func:`song_from_record`, so the rest of the
package only ever sees the current shape.

Records that predate ``lyricsOrder`` keep ``lyrics_order=None`` so readers can
fall back to ``sectionOrder``.
"""

import logging

from ..models import Song

logger = logging.getLogger(__name__)


def song_from_record(song_id: str, data: dict) -> Song:
    """Return a Song for the raw document *data* stored under *song_id*."""
    chords, chord_rows_order = _section_map(data.get("chords"))
    lyrics, lyric_rows_order = _section_map(data.get("lyrics"))

    section_order = _order_list(data.get("sectionOrder"))
    if section_order is None:
        # Array-shaped rows carry their own order; maps only have key order.
        section_order = chord_rows_order if chord_rows_order is not None else list(chords)

    lyrics_order = _order_list(data.get("lyricsOrder"))
    if lyrics_order is None and lyric_rows_order is not None:
        lyrics_order = lyric_rows_order

    if chord_rows_order is not None or lyric_rows_order is not None:
        logger.debug("Adapted array-shaped sections for song %s", song_id)

    return Song(
        id=song_id,
        title=_text(data.get("title")),
        creator=_text(data.get("creator")),
        language=_text(data.get("language")),
        type=_text(data.get("type")),
        chords=chords,
        lyrics=lyrics,
        section_order=section_order,
        lyrics_order=lyrics_order,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _section_map(value) -> tuple[dict[str, str], list[str] | None]:
    """Return ``(map, order)`` for a stored chords/lyrics value.

    ``order`` is only set for the legacy list shape; it is ``None`` for maps.
    """
    if isinstance(value, dict):
        return {str(k): _text(v) for k, v in value.items()}, None
    if isinstance(value, list):
        content_by_name: dict[str, str] = {}
        order: list[str] = []
        for row in value:
            if not isinstance(row, dict):
                continue
            name = _text(row.get("section")).strip()
            if not name:
                continue
            content_by_name[name] = _text(row.get("content"))
            order.append(name)
        return content_by_name, order
    return {}, None


def _order_list(value) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(name) for name in value if name]


def _text(value) -> str:
    return value if isinstance(value, str) else ""
