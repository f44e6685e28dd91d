import json

import httpx
import pytest

from chordbook.catalog import Catalog
from chordbook.editor import EditorState, SectionEditor
from chordbook.exceptions import StoreReadError, StoreWriteError
from chordbook.stores.firestore import (
    FirestoreConfig,
    FirestoreStore,
    decode_fields,
    encode_fields,
)


def _document(doc_id: str, title: str) -> dict:
    return {
        "name": f"projects/demo/databases/(default)/documents/songs/{doc_id}",
        "fields": {
            "title": {"stringValue": title},
            "creator": {"stringValue": "Anon"},
            "chords": {"mapValue": {"fields": {"Intro": {"stringValue": "C G"}}}},
            "sectionOrder": {"arrayValue": {"values": [{"stringValue": "Intro"}]}},
        },
    }


def _store(handler, api_key=None) -> FirestoreStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return FirestoreStore(FirestoreConfig(project="demo", api_key=api_key), client=client)


# ---------------------------------------------------------------------------
# Value encoding
# ---------------------------------------------------------------------------


def test_encode_payload():
    fields = encode_fields({
        "title": "Amazing Grace",
        "chords": {"Intro": "C G"},
        "sectionOrder": ["Intro"],
        "lyrics": {},
        "lyricsOrder": [],
    })
    assert fields == {
        "title": {"stringValue": "Amazing Grace"},
        "chords": {"mapValue": {"fields": {"Intro": {"stringValue": "C G"}}}},
        "sectionOrder": {"arrayValue": {"values": [{"stringValue": "Intro"}]}},
        "lyrics": {"mapValue": {"fields": {}}},
        "lyricsOrder": {"arrayValue": {"values": []}},
    }


def test_encode_scalars():
    fields = encode_fields({"n": 3, "f": 1.5, "b": True, "none": None})
    assert fields == {
        "n": {"integerValue": "3"},
        "f": {"doubleValue": 1.5},
        "b": {"booleanValue": True},
        "none": {"nullValue": None},
    }


def test_encode_unsupported_type_raises():
    with pytest.raises(TypeError):
        encode_fields({"x": object()})


def test_decode_tolerates_empty_map_and_array():
    assert decode_fields({
        "lyrics": {"mapValue": {}},
        "lyricsOrder": {"arrayValue": {}},
        "count": {"integerValue": "2"},
        "when": {"timestampValue": "2024-01-01T00:00:00Z"},
    }) == {"lyrics": {}, "lyricsOrder": [], "count": 2, "when": "2024-01-01T00:00:00Z"}


# ---------------------------------------------------------------------------
# fetch_all
# ---------------------------------------------------------------------------


def test_fetch_all_follows_page_tokens():
    seen_tokens = []

    def handler(request: httpx.Request) -> httpx.Response:
        token = request.url.params.get("pageToken")
        seen_tokens.append(token)
        if token is None:
            return httpx.Response(200, json={"documents": [_document("a", "One")], "nextPageToken": "p2"})
        return httpx.Response(200, json={"documents": [_document("b", "Two")]})

    songs = _store(handler).fetch_all("songs")
    assert seen_tokens == [None, "p2"]
    assert [(s.id, s.title) for s in songs] == [("a", "One"), ("b", "Two")]
    assert songs[0].chords == {"Intro": "C G"}
    assert songs[0].section_order == ["Intro"]
    assert songs[0].lyrics_order is None


def test_fetch_all_empty_collection():
    assert _store(lambda request: httpx.Response(200, json={})).fetch_all("songs") == []


def test_fetch_all_sends_api_key():
    urls = []

    def handler(request):
        urls.append(request.url)
        return httpx.Response(200, json={})

    _store(handler, api_key="secret").fetch_all("songs")
    assert urls[0].params["key"] == "secret"
    assert urls[0].host == "firestore.googleapis.com"
    assert urls[0].path.endswith("/documents/songs")


def test_fetch_all_http_error():
    with pytest.raises(StoreReadError) as exc_info:
        _store(lambda request: httpx.Response(403)).fetch_all("songs")
    assert exc_info.value.status_code == 403


def test_fetch_all_transport_error():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(StoreReadError) as exc_info:
        _store(handler).fetch_all("songs")
    assert exc_info.value.status_code == 0


# ---------------------------------------------------------------------------
# insert / replace
# ---------------------------------------------------------------------------


def test_insert_posts_fields_and_returns_id():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=_document("abc123", "Amazing Grace"))

    song_id = _store(handler).insert("songs", {"title": "Amazing Grace"})
    assert song_id == "abc123"
    assert requests[0].method == "POST"
    assert json.loads(requests[0].content) == {"fields": {"title": {"stringValue": "Amazing Grace"}}}


def test_insert_failure():
    with pytest.raises(StoreWriteError) as exc_info:
        _store(lambda request: httpx.Response(500)).insert("songs", {})
    assert exc_info.value.status_code == 500


def test_replace_patches_document():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=_document("abc123", "New"))

    _store(handler).replace("songs", "abc123", {"title": "New"})
    assert requests[0].method == "PATCH"
    assert requests[0].url.path.endswith("/documents/songs/abc123")


def test_replace_failure_carries_id():
    with pytest.raises(StoreWriteError) as exc_info:
        _store(lambda request: httpx.Response(404)).replace("songs", "gone", {})
    assert exc_info.value.song_id == "gone"
    assert exc_info.value.status_code == 404


def test_store_closes_client():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    with FirestoreStore(FirestoreConfig(project="demo"), client=client):
        pass
    assert client.is_closed


# ---------------------------------------------------------------------------
# Malformed replies
# ---------------------------------------------------------------------------


def test_fetch_all_non_json_reply():
    store = _store(lambda request: httpx.Response(200, text="<html>proxy login</html>"))
    with pytest.raises(StoreReadError) as exc_info:
        store.fetch_all("songs")
    assert exc_info.value.status_code == 200


def test_fetch_all_document_without_name():
    store = _store(lambda request: httpx.Response(200, json={"documents": [{"fields": {}}]}))
    with pytest.raises(StoreReadError):
        store.fetch_all("songs")


def test_catalog_load_survives_non_json_reply():
    store = _store(lambda request: httpx.Response(200, text="<html>proxy login</html>"))
    catalog = Catalog(store)
    assert catalog.load() == []
    assert not catalog.loading


def test_insert_reply_without_name():
    with pytest.raises(StoreWriteError) as exc_info:
        _store(lambda request: httpx.Response(200, json={})).insert("songs", {})
    assert exc_info.value.status_code == 200


def test_insert_non_json_reply():
    with pytest.raises(StoreWriteError):
        _store(lambda request: httpx.Response(200, text="oops")).insert("songs", {})


def test_replace_non_json_reply():
    with pytest.raises(StoreWriteError) as exc_info:
        _store(lambda request: httpx.Response(200, text="oops")).replace("songs", "abc123", {})
    assert exc_info.value.song_id == "abc123"


def test_editor_keeps_form_open_on_malformed_insert_reply():
    store = _store(lambda request: httpx.Response(200, json={}))
    editor = SectionEditor()
    editor.open_create()
    editor.set_field("title", "Amazing Grace")
    editor.set_field("creator", "John Newton")
    with pytest.raises(StoreWriteError):
        editor.save(store, "songs")
    assert editor.state is EditorState.CREATING
    assert editor.title == "Amazing Grace"
