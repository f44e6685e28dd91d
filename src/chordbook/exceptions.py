class ChordbookError(Exception):
    """Base exception for chordbook."""


class ValidationError(ChordbookError):
    """Raised when a song is saved without a title or creator."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Please fill in the song {field}")


class StoreReadError(ChordbookError):
    """Raised when songs cannot be fetched from the document store."""

    def __init__(self, collection: str, status_code: int):
        self.collection = collection
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} reading collection {collection!r}")


class StoreWriteError(ChordbookError):
    """Raised when a song cannot be inserted or replaced in the document store."""

    def __init__(self, collection: str, status_code: int, song_id: str | None = None):
        self.collection = collection
        self.status_code = status_code
        self.song_id = song_id
        target = f"{collection}/{song_id}" if song_id else collection
        super().__init__(f"HTTP {status_code} writing to {target!r}")


class EditorStateError(ChordbookError):
    """Raised when a form operation is attempted while no form is open."""


class SongNotFoundError(ChordbookError):
    """Raised when no song with the given id is loaded."""

    def __init__(self, song_id: str):
        self.song_id = song_id
        super().__init__(f"No song found with id: {song_id}")
