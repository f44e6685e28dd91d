import copy
import logging
import uuid

from ..exceptions import StoreWriteError
from ..models import Song
from .base import DocumentStore
from .legacy import song_from_record

logger = logging.getLogger(__name__)


class MemoryStore(DocumentStore):
    """Dict-backed store.  Useful for tests and for working without a network."""

    def __init__(self, collections: dict[str, dict[str, dict]] | None = None):
        # collection name -> document id -> raw document
        self.collections: dict[str, dict[str, dict]] = collections or {}

    def fetch_all(self, collection: str) -> list[Song]:
        documents = self.collections.get(collection, {})
        return [song_from_record(doc_id, copy.deepcopy(data)) for doc_id, data in documents.items()]

    def insert(self, collection: str, payload: dict) -> str:
        song_id = uuid.uuid4().hex[:20]
        self.collections.setdefault(collection, {})[song_id] = copy.deepcopy(payload)
        logger.debug("Inserted %s/%s", collection, song_id)
        return song_id

    def replace(self, collection: str, song_id: str, payload: dict) -> None:
        documents = self.collections.get(collection, {})
        if song_id not in documents:
            raise StoreWriteError(collection, 404, song_id)
        documents[song_id] = copy.deepcopy(payload)
        logger.debug("Replaced %s/%s", collection, song_id)
