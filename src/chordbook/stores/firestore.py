"""Store adapter for Google Cloud Firestore, spoken to over its REST API.

URL pattern::

    https://firestore.googleapis.com/v1/projects/<project>/databases/(default)/documents/<collection>

Operations:

    fetch_all   GET   <collection>?pageSize=N[&pageToken=T]   (repeated until no nextPageToken)
    insert      POST  <collection>                            (id = last segment of the returned "name")
    replace     PATCH <collection>/<id>                       (whole document, no update mask)

Document fields are wrapped in typed values::

    {"fields": {"title": {"stringValue": "Amazing Grace"},
                "chords": {"mapValue": {"fields": {"Intro": {"stringValue": "C G"}}}},
                "sectionOrder": {"arrayValue": {"values": [{"stringValue": "Intro"}]}}}}

:func:`encode_fields` and :func:`decode_fields` convert between plain Python
values and that wrapping.  Decoded documents go through
:func:`~chordbook.stores.legacy.song_from_record`.
"""

import logging
from dataclasses import dataclass

import httpx

from ..exceptions import StoreReadError, StoreWriteError
from ..models import Song
from .base import DocumentStore
from .legacy import song_from_record

logger = logging.getLogger(__name__)

_BASE_URL = "https://firestore.googleapis.com/v1"
_PAGE_SIZE = 300

# Raised while reading a 200 reply that is not a Firestore document body
# (non-JSON proxy pages, missing "name", wrong value shapes).
_MALFORMED = (ValueError, KeyError, TypeError, AttributeError)


@dataclass
class FirestoreConfig:
    """Connection settings for one Firestore database."""

    project: str
    api_key: str | None = None
    database: str = "(default)"
    timeout: float = 15.0

    @property
    def documents_url(self) -> str:
        return f"{_BASE_URL}/projects/{self.project}/databases/{self.database}/documents"


class FirestoreStore(DocumentStore):
    """Document store backed by a Firestore database."""

    def __init__(self, config: FirestoreConfig, client: httpx.Client | None = None):
        self.config = config
        self.client = client or httpx.Client(timeout=config.timeout)

    def __enter__(self) -> "FirestoreStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def fetch_all(self, collection: str) -> list[Song]:
        url = f"{self.config.documents_url}/{collection}"
        songs: list[Song] = []
        page_token: str | None = None
        while True:
            params = self._params(pageSize=_PAGE_SIZE)
            if page_token:
                params["pageToken"] = page_token
            logger.debug("GET %s (page token %s)", url, page_token)
            try:
                resp = self.client.get(url, params=params)
            except httpx.RequestError as exc:
                raise StoreReadError(collection, 0) from exc
            if resp.status_code != 200:
                raise StoreReadError(collection, resp.status_code)

            try:
                body = resp.json()
                for document in body.get("documents", []):
                    songs.append(
                        song_from_record(
                            _document_id(document["name"]),
                            decode_fields(document.get("fields", {})),
                        )
                    )
                page_token = body.get("nextPageToken")
            except _MALFORMED as exc:
                raise StoreReadError(collection, resp.status_code) from exc
            if not page_token:
                return songs

    def insert(self, collection: str, payload: dict) -> str:
        url = f"{self.config.documents_url}/{collection}"
        logger.debug("POST %s", url)
        try:
            resp = self.client.post(url, params=self._params(), json={"fields": encode_fields(payload)})
        except httpx.RequestError as exc:
            raise StoreWriteError(collection, 0) from exc
        if resp.status_code != 200:
            raise StoreWriteError(collection, resp.status_code)
        try:
            return _document_id(resp.json()["name"])
        except _MALFORMED as exc:
            raise StoreWriteError(collection, resp.status_code) from exc

    def replace(self, collection: str, song_id: str, payload: dict) -> None:
        url = f"{self.config.documents_url}/{collection}/{song_id}"
        logger.debug("PATCH %s", url)
        try:
            resp = self.client.patch(url, params=self._params(), json={"fields": encode_fields(payload)})
        except httpx.RequestError as exc:
            raise StoreWriteError(collection, 0, song_id) from exc
        if resp.status_code != 200:
            raise StoreWriteError(collection, resp.status_code, song_id)
        try:
            resp.json()["name"]
        except _MALFORMED as exc:
            raise StoreWriteError(collection, resp.status_code, song_id) from exc

    def _params(self, **extra) -> dict:
        params = dict(extra)
        if self.config.api_key:
            params["key"] = self.config.api_key
        return params


# ---------------------------------------------------------------------------
# Value encoding
# ---------------------------------------------------------------------------


def encode_value(value) -> dict:
    """Wrap a plain Python value in a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):  # before int: bool is an int subclass
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__} in Firestore")


def encode_fields(data: dict) -> dict:
    return {str(key): encode_value(value) for key, value in data.items()}


def decode_value(value: dict):
    """Unwrap a Firestore typed value into a plain Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    # timestampValue, referenceValue, bytesValue: kept as their string form
    for key in ("timestampValue", "referenceValue", "bytesValue"):
        if key in value:
            return value[key]
    return None


def decode_fields(fields: dict) -> dict:
    return {key: decode_value(value) for key, value in fields.items()}


def _document_id(name: str) -> str:
    """Return the document id from a full resource name."""
    return name.rstrip("/").split("/")[-1]
