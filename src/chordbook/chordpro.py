"""ChordPro rendering of a catalog song.

Renders either the chords view or the lyrics view of a
:class:`~chordbook.models.Song`, section by section in stored order.

Section label → ChordPro directive mapping
------------------------------------------

+--------------------------------------+------------------------------------+
| Label (case-insensitive first word)  | Directive pair                     |
+======================================+====================================+
| ``Verse``, ``Verse N``               | ``{start_of_verse: Verse N}`` /    |
|                                      | ``{end_of_verse}``                 |
+--------------------------------------+------------------------------------+
| ``Chorus``                           | ``{start_of_chorus}`` /            |
|                                      | ``{end_of_chorus}``                |
+--------------------------------------+------------------------------------+
| ``Bridge``, ``Bridge N``             | ``{start_of_bridge}`` /            |
|                                      | ``{end_of_bridge}``                |
+--------------------------------------+------------------------------------+
| anything else (``Intro``,            | ``{comment: <label>}``             |
| ``Pre Chorus``, custom names, ...)   |                                    |
+--------------------------------------+------------------------------------+

Sections whose content is blank for the chosen view are skipped.  Songs with
no order array at all get every map entry in map order.

Usage::

    from chordbook.chordpro import ChordProFormatter
    text = ChordProFormatter().render(song, mode="lyrics")
"""

from .models import Song

# Section labels whose directives ChordPro has standardised.
_STRUCTURED = {
    "verse": ("start_of_verse", "end_of_verse"),
    "chorus": ("start_of_chorus", "end_of_chorus"),
    "bridge": ("start_of_bridge", "end_of_bridge"),
}


class ChordProFormatter:
    """Render a :class:`~chordbook.models.Song` to ChordPro text."""

    def render(self, song: Song, mode: str = "chords") -> str:
        """Return ChordPro text for the *mode* view (``"chords"`` or ``"lyrics"``) of *song*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        parts.append(f"{{title: {song.title}}}")
        parts.append(f"{{artist: {song.creator}}}")
        if song.language:
            parts.append(f"{{meta: language {song.language}}}")
        if song.type:
            parts.append(f"{{meta: type {song.type}}}")

        # --- Section blocks ---
        sections = section_contents(song, mode)
        if not sections:
            parts.append("")
            parts.append(f"{{comment: No {mode} sections defined}}")
        for label, content in sections:
            parts.append("")  # blank line before every section
            parts.extend(_render_section(label, content))

        return "\n".join(parts) + "\n"


def section_contents(song: Song, mode: str) -> list[tuple[str, str]]:
    """Return ``(label, content)`` pairs to show for *mode*, in display order."""
    content_by_name = song.sections_for(mode)
    order = song.order_for(mode)
    if not order:
        return [(name, content) for name, content in content_by_name.items()]
    pairs = [(name, content_by_name.get(name, "")) for name in order]
    return [(name, content) for name, content in pairs if content.strip()]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _render_section(label: str, content: str) -> list[str]:
    """Return a list of lines for one section (no trailing blank line)."""
    lines = content.splitlines()

    label_lower = label.lower().split()[0] if label.strip() else ""

    if label_lower in _STRUCTURED:
        start_dir, end_dir = _STRUCTURED[label_lower]
        # Verse keeps its full label (e.g. "Verse 2"); chorus/bridge use the bare directive
        if label_lower == "verse":
            start_line = f"{{{start_dir}: {label}}}"
        else:
            start_line = f"{{{start_dir}}}"
        return [start_line, *lines, f"{{{end_dir}}}"]

    return [f"{{comment: {label}}}", *lines]
