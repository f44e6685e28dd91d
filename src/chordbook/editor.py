"""State machine behind the create/edit song form.

::

    IDLE --open_create()--> CREATING --save() ok / cancel()--> IDLE
    IDLE --open_edit(song)--> EDITING --save() ok / cancel()--> IDLE

Opening a form while another one is open replaces it.  A failed save leaves
the state and every row untouched so the user can retry.

Each list kind (``"chords"``, ``"lyrics"``) always holds at least one row.
"""

import logging
from enum import Enum, auto

from .exceptions import EditorStateError, StoreWriteError
from .models import CUSTOM_SENTINEL, Canonical, Custom, EditableSection, Song
from .sections import MODES, build_payload, classify_section_name, deserialize_sections
from .stores.base import DocumentStore

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = ("title", "creator", "language", "type")


class EditorState(Enum):
    IDLE = auto()
    CREATING = auto()
    EDITING = auto()


class SectionEditor:
    """The in-progress create or edit form.  One per catalog."""

    def __init__(self) -> None:
        self.state = EditorState.IDLE
        self._reset()

    # --- Transitions ---

    def open_create(self) -> None:
        self._reset()
        self.chords = [EditableSection(Canonical("Intro"))]
        self.lyrics = [EditableSection(Canonical("Verse"))]
        self.state = EditorState.CREATING

    def open_edit(self, song: Song) -> None:
        if song.id is None:
            raise ValueError("Cannot edit a song that has not been stored yet")
        self._reset()
        self.song_id = song.id
        self.title = song.title
        self.creator = song.creator
        self.language = song.language
        self.type = song.type
        self.chords = _rows_for_edit(song, "chords") or [EditableSection()]
        self.lyrics = _rows_for_edit(song, "lyrics") or [EditableSection()]
        self.state = EditorState.EDITING

    def cancel(self) -> None:
        self._reset()
        self.state = EditorState.IDLE

    def save(self, store: DocumentStore, collection: str) -> Song:
        """Validate, write through *store* and close the form.

        Returns the stored song.  Raises ValidationError before touching the
        store, or StoreWriteError after a failed write; the form stays open in
        both cases.
        """
        self._require_open()
        payload = build_payload(
            self.title, self.creator, self.language, self.type, self.chords, self.lyrics
        )
        try:
            if self.state is EditorState.CREATING:
                song_id = store.insert(collection, payload)
            else:
                song_id = self.song_id
                store.replace(collection, song_id, payload)
        except StoreWriteError as exc:
            logger.error("Error saving song %r: %s", self.title, exc)
            raise

        logger.info("Saved song %r as %s", self.title, song_id)
        self.cancel()
        return Song.from_payload(song_id, payload)

    # --- Form fields ---

    def set_field(self, name: str, value: str) -> None:
        self._require_open()
        if name not in _SCALAR_FIELDS:
            raise ValueError(f"Unknown song field: {name!r}")
        setattr(self, name, value)

    def rows(self, kind: str) -> list[EditableSection]:
        if kind not in MODES:
            raise ValueError(f"Unknown section list: {kind!r}")
        return self.chords if kind == "chords" else self.lyrics

    def add_row(self, kind: str) -> None:
        self._require_open()
        self.rows(kind).append(EditableSection())

    def remove_row(self, kind: str, index: int) -> None:
        """Delete row *index*.  Does nothing when it is the last row left."""
        self._require_open()
        rows = self.rows(kind)
        if not 0 <= index < len(rows):
            raise IndexError(f"No {kind} row at index {index}")
        if len(rows) == 1:
            return
        del rows[index]

    def change_field(self, kind: str, index: int, field: str, value) -> None:
        """Set ``section``, ``custom_section`` or ``content`` of one row.

        ``section`` accepts a canonical name, the ``"__custom__"`` sentinel or a
        :class:`Canonical`/:class:`Custom` value.  Picking a canonical name
        drops any custom text typed earlier.
        """
        self._require_open()
        rows = self.rows(kind)
        if not 0 <= index < len(rows):
            raise IndexError(f"No {kind} row at index {index}")
        row = rows[index]

        if field == "section":
            row.section = _section_from_choice(value)
        elif field in ("custom_section", "customSection"):
            row.section = Custom(value)
        elif field == "content":
            row.content = value
        else:
            raise ValueError(f"Unknown section field: {field!r}")

    # --- Internal helpers ---

    def _require_open(self) -> None:
        if self.state is EditorState.IDLE:
            raise EditorStateError("No song form is open")

    def _reset(self) -> None:
        self.song_id: str | None = None
        self.title = ""
        self.creator = ""
        self.language = "English"
        self.type = "Fast Song"
        self.chords: list[EditableSection] = []
        self.lyrics: list[EditableSection] = []


def _rows_for_edit(song: Song, kind: str) -> list[EditableSection]:
    """Rows for *kind*, keeping map entries a borrowed order array does not name.

    Records without their own order array (lyrics before ``lyricsOrder``
    existed) reuse the other view's order; sections only present in the map
    are appended so saving the form does not drop them.
    """
    rows = deserialize_sections(song, kind)
    own_order = song.section_order if kind == "chords" else song.lyrics_order
    if own_order is None:
        named = set(song.order_for(kind) or [])
        rows.extend(
            EditableSection(section=classify_section_name(name), content=content)
            for name, content in song.sections_for(kind).items()
            if name not in named
        )
    return rows


def _section_from_choice(value) -> Canonical | Custom:
    if isinstance(value, (Canonical, Custom)):
        return value
    if value == CUSTOM_SENTINEL:
        return Custom("")
    return Canonical(value)
