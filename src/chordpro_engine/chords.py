"""Inline chord scanning.

Implements the ``[chord]`` side of ChordPro:

  1. CHORD_RE / is_chord()      : chord-symbol grammar (root, suffix, bass)
  2. is_section_label()         : tell ``[Verse 1]`` apart from ``[Am]``
  3. scan_chord_tokens()        : every bracketed chord with its position
  4. parse_chord_progression()  : unique chord symbols in first-seen order

The scanner treats chord symbols as opaque strings.  The grammar is only used
to decide whether a lone bracket on a line is a section header, and by the
transposition engine to split a symbol into its parts.
"""

import re

from .models import ChordToken

# ---------------------------------------------------------------------------
# Chord grammar
# ---------------------------------------------------------------------------

# One piece of a chord suffix.  Digit runs are anchored with (?!\d) so a run
# like "13" can only be split one way.
_SUFFIX_PIECE = (
    r"(?:maj|min|dim|aug|sus|add|alt|m|M|°|ø|\+|-"
    r"|[#b]?\d+(?!\d)"
    r"|/\d+(?!\d)"  # 6/9
    r"|\([^()]*\))"  # (add9), (b5)
)

# Handles:
#   Standard:     C, Am, Am7, Cmaj7, Bb7sus4, F#m, Ddim, C#°7, Am7b5
#   Slash bass:   G/B, F/A, D/F#
#   Parenthesed:  C(add9)/E(b5)
CHORD_RE = re.compile(
    r"^(?P<root>[A-G][#b]?)"
    rf"(?P<suffix>{_SUFFIX_PIECE}*)"
    r"(?:/(?P<bass>[A-G][#b]?)(?P<bass_suffix>\([^()]*\))?)?$"
)

_LETTER_RE = re.compile(r"[^\W\d_]")


def is_chord(symbol: str) -> bool:
    """Return True if *symbol* is a recognisable chord name."""
    return CHORD_RE.match(symbol) is not None


def is_section_label(inner: str) -> bool:
    """Return True if bracket contents read as a section name, not a chord.

    ``Verse 1``, ``Chorus`` and ``Empty Section`` are labels; ``Am`` and
    ``G/B`` are chords even when they sit alone on a line.
    """
    inner = inner.strip()
    return bool(_LETTER_RE.search(inner)) and not is_chord(inner)


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def scan_chord_tokens(text: str) -> list[ChordToken]:
    """Return every bracketed chord in *text*, in order, with positions.

    Single forward pass.  Rules:

    - Anything inside ``{...}`` is a directive, never a chord.
    - A ``[`` still open at the end of its line is dropped, as is a capture
      abandoned by a second ``[``.
    - Empty ``[]`` and blank ``[  ]`` spans are dropped.
    - A line holding nothing but one section label (``[Chorus]``) yields no
      tokens.

    ``\\r\\n``, ``\\r`` and ``\\n`` all end a line.
    """
    source = text + "\n"  # sentinel flushes the last line
    tokens: list[ChordToken] = []
    pending: list[ChordToken] = []  # tokens on the current line
    other_content = False  # anything besides bracket spans on the current line
    in_brace = False
    bracket_start = -1  # index of the open '[', -1 when not capturing
    bracket_col = 0
    line, col = 1, 0

    for i, ch in enumerate(source):
        if ch == "\n" or ch == "\r":
            if ch == "\n" and i > 0 and source[i - 1] == "\r":
                continue  # second half of \r\n
            if bracket_start >= 0:
                other_content = True
            if not _is_header_line(pending, other_content):
                tokens.extend(pending)
            pending = []
            other_content = in_brace = False
            bracket_start = -1
            line, col = line + 1, 0
            continue

        col += 1

        if in_brace:
            if ch == "}":
                in_brace = False
            continue

        if bracket_start >= 0:
            if ch == "]":
                symbol = source[bracket_start + 1:i]
                if symbol.strip():
                    pending.append(ChordToken(symbol, line, bracket_col, bracket_start + 1))
                bracket_start = -1
            elif ch == "[":
                other_content = True
                bracket_start, bracket_col = i, col
            continue

        if ch == "[":
            bracket_start, bracket_col = i, col
        elif ch == "{":
            in_brace = other_content = True
        elif not ch.isspace():
            other_content = True

    return tokens


def _is_header_line(pending: list[ChordToken], other_content: bool) -> bool:
    return len(pending) == 1 and not other_content and is_section_label(pending[0].symbol)


def parse_chord_progression(text: str) -> list[str]:
    """Return the unique chord symbols in *text*, in order of first appearance.

    Example::

        >>> parse_chord_progression("[G]Amazing [C]grace how [G]sweet")
        ['G', 'C']
    """
    seen: set[str] = set()
    progression: list[str] = []
    for token in scan_chord_tokens(text):
        if token.symbol not in seen:
            seen.add(token.symbol)
            progression.append(token.symbol)
    return progression


def has_chords(text: str) -> bool:
    """Return True if *text* contains at least one recognisable bracketed chord."""
    return any(is_chord(token.symbol) for token in scan_chord_tokens(text))
