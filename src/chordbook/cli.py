import logging
import sys

import click

from .catalog import Catalog
from .chordpro import ChordProFormatter
from .exceptions import ChordbookError
from .models import LANGUAGES, SONG_TYPES
from .sections import classify_section_name
from .stores.base import DocumentStore
from .stores.firestore import FirestoreConfig, FirestoreStore

TRANSPOSE_CHOICES = ["Original", "+1", "+2", "-1", "-2"]


def _make_store(project: str | None, api_key: str | None) -> DocumentStore:
    if not project:
        raise click.UsageError("No Firestore project given (use --project or CHORDBOOK_PROJECT)")
    return FirestoreStore(FirestoreConfig(project=project, api_key=api_key))


def _parse_section(text: str) -> tuple[str, str]:
    """Split ``NAME=CONTENT`` and expand ``\\n`` escapes in the content."""
    name, sep, content = text.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected NAME=CONTENT, got {text!r}")
    return name.strip(), content.replace("\\n", "\n")


def _fill_rows(catalog: Catalog, kind: str, sections: tuple[str, ...]) -> None:
    """Replace the open form's *kind* rows with the given ``NAME=CONTENT`` pairs."""
    editor = catalog.editor
    while len(editor.rows(kind)) > 1:
        editor.remove_row(kind, len(editor.rows(kind)) - 1)
    for i, text in enumerate(sections):
        name, content = _parse_section(text)
        if i > 0:
            editor.add_row(kind)
        editor.change_field(kind, i, "section", classify_section_name(name))
        editor.change_field(kind, i, "content", content)


def _load(ctx: click.Context) -> Catalog:
    """Connect to the configured store and load the catalog."""
    settings = ctx.obj
    store = _make_store(settings["project"], settings["api_key"])
    ctx.call_on_close(store.close)
    catalog = Catalog(store, settings["collection"])
    catalog.load()
    return catalog


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.option("--project", envvar="CHORDBOOK_PROJECT", default=None, metavar="ID",
              help="Firestore project id.")
@click.option("--api-key", envvar="CHORDBOOK_API_KEY", default=None, metavar="KEY",
              help="Firestore web API key.")
@click.option("--collection", envvar="CHORDBOOK_COLLECTION", default="songs", show_default=True,
              help="Collection the songs are kept in.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, project: str | None, api_key: str | None, collection: str,
         verbose: bool) -> None:
    """Browse and edit a collection of song chord and lyric sheets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"project": project, "api_key": api_key, "collection": collection}


@main.command("list")
@click.option("-s", "--search", default="", help="Match title or creator (case-insensitive).")
@click.option("--language", default="all", show_default=True, help="Only songs in this language.")
@click.option("--type", "song_type", default="all", show_default=True, help="Only songs of this type.")
@click.option("-n", "--limit", default=8, show_default=True, help="Number of songs to show.")
@click.pass_context
def list_songs(ctx: click.Context, search: str, language: str, song_type: str, limit: int) -> None:
    """List songs, optionally searched and filtered."""
    catalog = _load(ctx)
    catalog.search_term = search
    catalog.language = language
    catalog.type = song_type
    catalog.items_to_show = limit

    matches = catalog.filtered()
    if not matches:
        filtering = search or language != "all" or song_type != "all"
        click.echo("No songs match your search" if filtering else "No songs found")
        return

    for song in catalog.displayed():
        click.echo(f"{song.id}  {song.title} - {song.creator} ({song.language}, {song.type})")
    click.echo(f"Showing {len(catalog.displayed())} of {len(matches)} songs")


@main.command()
@click.argument("song_id")
@click.option("--lyrics", is_flag=True, default=False, help="Show lyrics instead of chords.")
@click.option("--transpose", type=click.Choice(TRANSPOSE_CHOICES), default="Original",
              show_default=True, help="Accepted for compatibility; chords are shown as stored.")
@click.pass_context
def show(ctx: click.Context, song_id: str, lyrics: bool, transpose: str) -> None:
    """Print one song as ChordPro text."""
    catalog = _load(ctx)
    try:
        song = catalog.get(song_id)
    except ChordbookError as exc:
        _fail(exc)
    text = ChordProFormatter().render(song, mode="lyrics" if lyrics else "chords")
    click.echo(text, nl=False)


@main.command()
@click.option("--title", default="", help="Song title.")
@click.option("--creator", default="", help="Song creator.")
@click.option("--language", default=LANGUAGES[0], show_default=True,
              help=f"Song language, e.g. {', '.join(LANGUAGES)}.")
@click.option("--type", "song_type", default=SONG_TYPES[0], show_default=True,
              help=f"Song type, e.g. {', '.join(SONG_TYPES)}.")
@click.option("--chord", "chords", multiple=True, metavar="NAME=CONTENT",
              help="Chord section, repeatable, in display order.")
@click.option("--lyric", "lyrics", multiple=True, metavar="NAME=CONTENT",
              help="Lyric section, repeatable, in display order.")
@click.pass_context
def add(ctx: click.Context, title: str, creator: str, language: str, song_type: str,
        chords: tuple[str, ...], lyrics: tuple[str, ...]) -> None:
    """Add a new song."""
    catalog = _load(ctx)
    catalog.start_create()
    editor = catalog.editor
    editor.set_field("title", title)
    editor.set_field("creator", creator)
    editor.set_field("language", language)
    editor.set_field("type", song_type)
    for kind, sections in (("chords", chords), ("lyrics", lyrics)):
        if sections:
            _fill_rows(catalog, kind, sections)
        else:
            # Nothing given: drop the placeholder row instead of saving it empty
            editor.change_field(kind, 0, "section", "")

    try:
        song = catalog.save()
    except ChordbookError as exc:
        _fail(exc)
    click.echo(f"Added {song.id}")


@main.command()
@click.argument("song_id")
@click.option("--title", default=None)
@click.option("--creator", default=None)
@click.option("--language", default=None)
@click.option("--type", "song_type", default=None)
@click.option("--chord", "chords", multiple=True, metavar="NAME=CONTENT",
              help="Replace all chord sections (repeatable).")
@click.option("--lyric", "lyrics", multiple=True, metavar="NAME=CONTENT",
              help="Replace all lyric sections (repeatable).")
@click.pass_context
def edit(ctx: click.Context, song_id: str, title: str | None, creator: str | None,
         language: str | None, song_type: str | None, chords: tuple[str, ...],
         lyrics: tuple[str, ...]) -> None:
    """Edit an existing song.  Options left out keep their stored value."""
    catalog = _load(ctx)
    try:
        catalog.start_edit(song_id)
        editor = catalog.editor
        for name, value in (("title", title), ("creator", creator),
                            ("language", language), ("type", song_type)):
            if value is not None:
                editor.set_field(name, value)
        if chords:
            _fill_rows(catalog, "chords", chords)
        if lyrics:
            _fill_rows(catalog, "lyrics", lyrics)
        song = catalog.save()
    except ChordbookError as exc:
        _fail(exc)
    click.echo(f"Updated {song.id}")
