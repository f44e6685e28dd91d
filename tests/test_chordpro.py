from chordbook.chordpro import ChordProFormatter, section_contents
from chordbook.models import Song


def _song(**kwargs) -> Song:
    defaults = dict(title="Amazing Grace", creator="John Newton", language="English", type="Slow Song")
    defaults.update(kwargs)
    return Song(**defaults)


def _render(song: Song, mode: str = "chords") -> str:
    return ChordProFormatter().render(song, mode=mode)


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def test_title_and_creator_in_output():
    out = _render(_song())
    assert "{title: Amazing Grace}" in out
    assert "{artist: John Newton}" in out


def test_language_and_type_as_meta():
    out = _render(_song())
    assert "{meta: language English}" in out
    assert "{meta: type Slow Song}" in out


def test_empty_meta_omitted():
    out = _render(_song(language="", type=""))
    assert "{meta:" not in out


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def test_verse_section_directives():
    song = _song(lyrics={"Verse 2": "Twas grace"}, lyrics_order=["Verse 2"])
    out = _render(song, "lyrics")
    assert "{start_of_verse: Verse 2}\nTwas grace\n{end_of_verse}" in out


def test_chorus_section_directives():
    out = _render(_song(chords={"Chorus": "F C"}, section_order=["Chorus"]))
    assert "{start_of_chorus}\nF C\n{end_of_chorus}" in out


def test_other_labels_become_comments():
    out = _render(_song(chords={"Pre Chorus": "Dm G", "Vamp": "D"}, section_order=["Pre Chorus", "Vamp"]))
    assert "{comment: Pre Chorus}\nDm G" in out
    assert "{comment: Vamp}\nD" in out


def test_sections_follow_order_array():
    song = _song(chords={"Intro": "C", "Outro": "G"}, section_order=["Outro", "Intro"])
    out = _render(song)
    assert out.index("{comment: Outro}") < out.index("{comment: Intro}")


def test_blank_sections_skipped():
    song = _song(chords={"Intro": "  ", "Chorus": "F C"}, section_order=["Intro", "Chorus"])
    assert section_contents(song, "chords") == [("Chorus", "F C")]


def test_multiline_content():
    out = _render(_song(chords={"Intro": "C G\nAm F"}, section_order=["Intro"]))
    assert "{comment: Intro}\nC G\nAm F\n" in out


def test_lyrics_view_uses_legacy_fallback_order():
    song = _song(
        chords={"Verse": "C G", "Chorus": "Am F"},
        lyrics={"Chorus": "Sing it"},
        section_order=["Verse", "Chorus"],
    )
    assert section_contents(song, "lyrics") == [("Chorus", "Sing it")]


def test_no_order_shows_every_map_entry():
    song = _song(chords={"Intro": "C", "Outro": "G"}, section_order=None)
    assert section_contents(song, "chords") == [("Intro", "C"), ("Outro", "G")]


def test_nothing_to_show():
    out = _render(_song(), "lyrics")
    assert "{comment: No lyrics sections defined}" in out


def test_output_ends_with_single_newline():
    out = _render(_song(chords={"Intro": "C"}, section_order=["Intro"]))
    assert out.endswith("\n")
    assert not out.endswith("\n\n")
