from dataclasses import dataclass, field

# Sentinel used by form layers for "let me type my own section name".
CUSTOM_SENTINEL = "__custom__"

CHORD_SECTIONS = ("Intro", "Verse", "Pre Chorus", "Chorus", "Bridge", "Outro")
LYRIC_SECTIONS = ("Verse", "Verse 2", "Verse 3", "Pre Chorus", "Chorus", "Bridge", "Bridge 2")

# Union of both pickers, used to classify names when reloading a song.
CANONICAL_SECTIONS = frozenset(CHORD_SECTIONS) | frozenset(LYRIC_SECTIONS)

LANGUAGES = ("English", "Tagalog")
SONG_TYPES = ("Fast Song", "Slow Song")


@dataclass(frozen=True)
class Canonical:
    """A section picked from the fixed list. ``name == ""`` means nothing picked yet."""

    name: str = ""


@dataclass(frozen=True)
class Custom:
    """A section whose name the user typed in."""

    text: str = ""


SectionName = Canonical | Custom


@dataclass
class EditableSection:
    """One row of the create/edit form: a section name and its content."""

    section: SectionName = field(default_factory=Canonical)
    content: str = ""

    @property
    def custom_section(self) -> str:
        if isinstance(self.section, Custom):
            return self.section.text
        return ""


@dataclass
class Song:
    """A song sheet as persisted in the document store.

    ``lyrics_order`` is ``None`` on records written before lyrics had their
    own order; readers fall back to ``section_order`` for those.
    """

    title: str
    creator: str
    language: str = "English"
    type: str = "Fast Song"
    chords: dict[str, str] = field(default_factory=dict)
    lyrics: dict[str, str] = field(default_factory=dict)
    section_order: list[str] | None = field(default_factory=list)
    lyrics_order: list[str] | None = None
    id: str | None = None

    def order_for(self, mode: str) -> list[str] | None:
        """Return the order array for *mode*, falling back to the other view's."""
        if mode == "chords":
            primary, fallback = self.section_order, self.lyrics_order
        elif mode == "lyrics":
            primary, fallback = self.lyrics_order, self.section_order
        else:
            raise ValueError(f"Unknown section mode: {mode!r}")
        return primary if primary is not None else fallback

    def sections_for(self, mode: str) -> dict[str, str]:
        if mode == "chords":
            return self.chords
        if mode == "lyrics":
            return self.lyrics
        raise ValueError(f"Unknown section mode: {mode!r}")

    @classmethod
    def from_payload(cls, song_id: str | None, payload: dict) -> "Song":
        """Build a Song from a payload already in the current (map + order) shape."""
        return cls(
            id=song_id,
            title=payload.get("title", ""),
            creator=payload.get("creator", ""),
            language=payload.get("language", ""),
            type=payload.get("type", ""),
            chords=dict(payload.get("chords") or {}),
            lyrics=dict(payload.get("lyrics") or {}),
            section_order=_copy_order(payload.get("sectionOrder")),
            lyrics_order=_copy_order(payload.get("lyricsOrder")),
        )


def _copy_order(value) -> list[str] | None:
    return list(value) if value is not None else None
