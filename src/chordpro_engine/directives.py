"""ChordPro directive parsing and metadata extraction.

A directive is a single-line ``{name: value}`` token.  Names are
case-insensitive; a handful of short aliases resolve to canonical names:

+-------------+--------------------+
| Directive   | Metadata field     |
+=============+====================+
| ``t``       | ``title``          |
+-------------+--------------------+
| ``st``      | ``subtitle``       |
+-------------+--------------------+
| ``a``       | ``artist``         |
+-------------+--------------------+
| ``time``    | ``time_signature`` |
+-------------+--------------------+

``tempo``, ``capo`` and ``year`` are integers; any other value drops the field.
Structural directives (``{start_of_verse}``, ``{soc}``, ``{comment: ...}``, ...)
are recognised but never become metadata.  Every other name is kept verbatim
(lower-cased) in :attr:`Metadata.custom`.

Usage::

    from chordpro_engine.directives import extract_metadata
    meta = extract_metadata(Path("song.cho").read_text())
    meta.title, meta.tempo
"""

import re
from typing import NamedTuple

from .models import Metadata

# A {...} token confined to one line.  Nested braces are not part of the grammar.
DIRECTIVE_TOKEN_RE = re.compile(r"\{([^{}\r\n]*)\}")
# A line that is nothing but one directive.
DIRECTIVE_LINE_RE = re.compile(r"^\{([^{}]*)\}$")

_ALIASES = {
    "t": "title",
    "st": "subtitle",
    "a": "artist",
    "time": "time_signature",
}

_TEXT_FIELDS = frozenset({
    "title", "subtitle", "artist", "composer", "lyricist", "key",
    "time_signature", "album", "genre", "copyright",
})
_INT_FIELDS = frozenset({"tempo", "capo", "year"})
# At most nine digits; longer runs drop the field like any other bad number.
_INT_RE = re.compile(r"^[0-9]{1,9}$")

# Directives that take no argument.
FLAG_DIRECTIVES = frozenset({
    "soc", "eoc", "sov", "eov", "sob", "eob", "sot", "eot", "sog", "eog",
    "chorus", "new_song", "ns", "new_page", "np", "new_physical_page", "npp",
    "column_break", "colb", "cb", "grid", "g", "no_grid", "ng",
})

# Section wrappers: start_of_verse, end_of_chorus, start_of_tab, ...
_SECTION_DIRECTIVE_RE = re.compile(r"^(?:start|end)_of_[a-z_]+$")

# Formatting / chord-definition directives that take a value but are not metadata.
_FORMAT_DIRECTIVES = frozenset({
    "comment", "c", "comment_italic", "ci", "comment_box", "cb", "highlight",
    "define", "chord", "transpose", "image",
    "textfont", "textsize", "textcolour", "chordfont", "chordsize", "chordcolour",
    "tabfont", "tabsize", "tabcolour", "titles", "columns", "col", "pagetype",
})


class Directive(NamedTuple):
    name: str  # lower-cased, not alias-resolved
    value: str
    has_colon: bool


def parse_directive(body: str) -> Directive | None:
    """Split the inside of a ``{...}`` token into name and value.

    Returns ``None`` when the name is empty (``{}``, ``{: value}``).  The name
    of a colon-less body is the whole body, lower-cased.
    """
    name, sep, value = body.partition(":")
    name = name.strip().lower()
    if not name:
        return None
    return Directive(name=name, value=value.strip(), has_colon=bool(sep))


def canonical_name(name: str) -> str:
    """Resolve a lower-cased directive name to its canonical form."""
    return _ALIASES.get(name, name)


def is_flag_directive(name: str) -> bool:
    """Return True if *name* is a directive that is complete without a value."""
    return name in FLAG_DIRECTIVES or bool(_SECTION_DIRECTIVE_RE.match(name))


def is_structural_directive(name: str) -> bool:
    return is_flag_directive(name) or name in _FORMAT_DIRECTIVES


def extract_metadata(text: str) -> Metadata:
    """Return the :class:`~chordpro_engine.models.Metadata` declared in *text*.

    Malformed directives (no colon, empty name, empty value, non-numeric
    value for a numeric field) are skipped.  The first occurrence of a field
    wins.  Never raises on textual input.
    """
    fields: dict = {}
    custom: dict[str, str] = {}

    for match in DIRECTIVE_TOKEN_RE.finditer(text):
        directive = parse_directive(match.group(1))
        if directive is None or not directive.has_colon or not directive.value:
            continue

        name, value = directive.name, directive.value
        if name == "meta":
            # ChordPro 6 form: {meta: name value}
            name, _, value = value.partition(" ")
            name, value = name.strip().lower(), value.strip()
            if not name or not value:
                continue
        name = canonical_name(name)

        if name in _INT_FIELDS:
            if name not in fields and _INT_RE.match(value):
                fields[name] = int(value)
        elif name in _TEXT_FIELDS:
            fields.setdefault(name, value)
        elif not is_structural_directive(name):
            custom.setdefault(name, value)

    return Metadata(**fields, custom=custom)
