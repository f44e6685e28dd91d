"""In-memory song catalog: the loaded songs, the list filters and the open form.

Usage::

    from chordbook.catalog import Catalog
    from chordbook.stores.memory import MemoryStore

    catalog = Catalog(MemoryStore())
    catalog.load()
    catalog.start_create()
    catalog.editor.set_field("title", "Amazing Grace")
    catalog.editor.set_field("creator", "John Newton")
    song = catalog.save()

Local state changes only after the store confirms a write.
"""

import logging

from .editor import SectionEditor
from .exceptions import SongNotFoundError, StoreReadError
from .models import Song
from .stores.base import DocumentStore

logger = logging.getLogger(__name__)

ALL = "all"
PAGE_SIZE = 8


class Catalog:
    """Application state owned by one front end."""

    def __init__(self, store: DocumentStore, collection: str = "songs"):
        self.store = store
        self.collection = collection
        self.songs: list[Song] = []
        self.loading = True
        self.search_term = ""
        self.language = ALL
        self.type = ALL
        self.items_to_show = PAGE_SIZE
        self.editor = SectionEditor()

    # --- Loading ---

    def load(self) -> list[Song]:
        """Fetch the whole collection.  A failed read leaves the catalog empty."""
        try:
            self.songs = self.store.fetch_all(self.collection)
        except StoreReadError as exc:
            logger.error("Error fetching songs: %s", exc)
            self.songs = []
        finally:
            self.loading = False
        logger.debug("Loaded %d songs from %r", len(self.songs), self.collection)
        return self.songs

    def get(self, song_id: str) -> Song:
        for song in self.songs:
            if song.id == song_id:
                return song
        raise SongNotFoundError(song_id)

    # --- Search and filters ---

    def filtered(self) -> list[Song]:
        """Songs matching the search term (title or creator) and both filters."""
        term = self.search_term.lower()
        return [
            song
            for song in self.songs
            if (term in song.title.lower() or term in song.creator.lower())
            and (self.language == ALL or song.language == self.language)
            and (self.type == ALL or song.type == self.type)
        ]

    def unique_languages(self) -> list[str]:
        return _unique(song.language for song in self.songs)

    def unique_types(self) -> list[str]:
        return _unique(song.type for song in self.songs)

    def displayed(self) -> list[Song]:
        return self.filtered()[: self.items_to_show]

    def has_more(self) -> bool:
        return self.items_to_show < len(self.filtered())

    def see_more(self) -> None:
        self.items_to_show = min(self.items_to_show + PAGE_SIZE, len(self.filtered()))

    # --- Form ---

    def start_create(self) -> None:
        self.editor.open_create()

    def start_edit(self, song_id: str) -> None:
        self.editor.open_edit(self.get(song_id))

    def cancel(self) -> None:
        self.editor.cancel()

    def save(self) -> Song:
        """Save the open form and apply the result to the loaded songs."""
        song = self.editor.save(self.store, self.collection)
        for i, existing in enumerate(self.songs):
            if existing.id == song.id:
                self.songs[i] = song
                break
        else:
            self.songs.append(song)
        return song


def _unique(values) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)
