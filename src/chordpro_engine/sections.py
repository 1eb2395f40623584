"""Split a ChordPro document into named sections.

A header is a line holding a single ``[...]`` span whose contents read as a
label rather than a chord:

    [Verse 1]       header
    [Chorus]        header
    [Am]            chord line, not a header
    [G]Amazing      lyric line

Lines before the first header form an ``"Untitled"`` section, kept only when
it holds something besides directives (a ``{title: ...}`` block alone does not
make a section).  Every named header yields a section, even an empty one.
"""

import re

from .chords import is_section_label, parse_chord_progression
from .directives import DIRECTIVE_LINE_RE
from .models import Section

UNTITLED = "Untitled"

_HEADER_RE = re.compile(r"^\[([^\[\]]+)\]$")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def section_label(line: str) -> str | None:
    """Return the label of a header line, or ``None`` if *line* is not a header."""
    m = _HEADER_RE.match(line.strip())
    if m and is_section_label(m.group(1)):
        return m.group(1).strip()
    return None


def is_section_header(line: str) -> bool:
    return section_label(line) is not None


def extract_sections(text: str) -> list[Section]:
    """Return the sections of *text* in document order.

    Blank lines are dropped; every other line is stored stripped.  Each
    section's ``chords`` lists the unique chords of its own lines.
    """
    sections: list[Section] = []
    current = Section(name=UNTITLED)
    named = False  # has a header been seen yet?

    for raw in _LINE_BREAK_RE.split(text):
        line = raw.strip()
        if not line:
            continue

        label = section_label(line)
        if label is not None:
            if named or _has_body(current):
                sections.append(current)
            current = Section(name=label)
            named = True
            continue

        current.lines.append(line)

    if named or _has_body(current):
        sections.append(current)

    for section in sections:
        section.chords = parse_chord_progression("\n".join(section.lines))
    return sections


def _has_body(section: Section) -> bool:
    """Return True if *section* has a line that is not a bare directive."""
    return any(not DIRECTIVE_LINE_RE.match(line) for line in section.lines)
