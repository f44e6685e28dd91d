"""Conversion between editable section rows and the persisted song shape.

A song is stored as two name → content maps plus one order array per map::

    chords       = {"Intro": "C G Am F", "Chorus": "F C G"}
    sectionOrder = ["Intro", "Chorus"]
    lyrics       = {"Verse": "Amazing grace..."}
    lyricsOrder  = ["Verse"]

The editor works on ordered lists of :class:`~chordbook.models.EditableSection`
instead.  :func:`serialize_sections` goes from rows to the stored shape and
:func:`deserialize_sections` goes back.  Both resolve names through
:func:`resolve_section_name`, so for songs without duplicate section names
the two are inverses.

Duplicate names are kept as observed in stored data: every occurrence stays
in the order array while the map holds the content of the last one.
"""

from dataclasses import dataclass, field

from .exceptions import ValidationError
from .models import CANONICAL_SECTIONS, Canonical, Custom, EditableSection, Song

MODES = ("chords", "lyrics")


@dataclass
class SerializedSections:
    """The section half of a stored song."""

    chords: dict[str, str] = field(default_factory=dict)
    lyrics: dict[str, str] = field(default_factory=dict)
    section_order: list[str] = field(default_factory=list)
    lyrics_order: list[str] = field(default_factory=list)


def resolve_section_name(entry: EditableSection) -> str:
    """Return the effective section name for *entry*.

    Custom names are stripped of surrounding whitespace; canonical names are
    returned verbatim.
    """
    if isinstance(entry.section, Custom):
        return (entry.section.text or "").strip()
    return entry.section.name


def classify_section_name(name: str) -> Canonical | Custom:
    if name in CANONICAL_SECTIONS:
        return Canonical(name)
    return Custom(name)


def serialize_sections(
    chords: list[EditableSection], lyrics: list[EditableSection]
) -> SerializedSections:
    """Turn the two editable row lists into maps plus order arrays."""
    chord_map, chord_order = _serialize_rows(chords)
    lyric_map, lyric_order = _serialize_rows(lyrics)
    return SerializedSections(
        chords=chord_map,
        lyrics=lyric_map,
        section_order=chord_order,
        lyrics_order=lyric_order,
    )


def deserialize_sections(song: Song, mode: str) -> list[EditableSection]:
    """Rebuild editable rows for one view (``"chords"`` or ``"lyrics"``) of *song*.

    One row per entry of the view's order array.  Records without a
    ``lyricsOrder`` reuse ``sectionOrder``.  Names missing from the map get
    empty content.
    """
    content_by_name = song.sections_for(mode)
    order = song.order_for(mode) or []
    return [
        EditableSection(
            section=classify_section_name(name),
            content=content_by_name.get(name, ""),
        )
        for name in order
    ]


def validate_song(title: str, creator: str) -> None:
    """Raise :class:`ValidationError` unless both *title* and *creator* are filled in."""
    if not (title or "").strip():
        raise ValidationError("title")
    if not (creator or "").strip():
        raise ValidationError("creator")


def build_payload(
    title: str,
    creator: str,
    language: str,
    type: str,
    chords: list[EditableSection],
    lyrics: list[EditableSection],
) -> dict:
    """Validate and return the document body for the store."""
    validate_song(title, creator)
    serialized = serialize_sections(chords, lyrics)
    return {
        "title": title,
        "creator": creator,
        "language": language,
        "type": type,
        "chords": serialized.chords,
        "lyrics": serialized.lyrics,
        "sectionOrder": serialized.section_order,
        "lyricsOrder": serialized.lyrics_order,
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _serialize_rows(rows: list[EditableSection]) -> tuple[dict[str, str], list[str]]:
    content_by_name: dict[str, str] = {}
    order: list[str] = []
    for row in rows:
        name = resolve_section_name(row)
        if not name:
            continue
        content_by_name[name] = row.content
        order.append(name)
    return content_by_name, order
