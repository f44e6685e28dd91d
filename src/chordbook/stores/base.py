from abc import ABC, abstractmethod

from ..models import Song


class DocumentStore(ABC):
    """Abstract base class for the remote collection songs are kept in."""

    @abstractmethod
    def fetch_all(self, collection: str) -> list[Song]:
        """Return every song in *collection*.

        Raises StoreReadError when the collection cannot be read.
        """

    @abstractmethod
    def insert(self, collection: str, payload: dict) -> str:
        """Store *payload* as a new document and return its generated id.

        Raises StoreWriteError on failure.
        """

    @abstractmethod
    def replace(self, collection: str, song_id: str, payload: dict) -> None:
        """Overwrite the document *song_id* with *payload*.

        Raises StoreWriteError on failure.
        """

    def close(self) -> None:
        """Release any connection the store holds.  Nothing to do by default."""
