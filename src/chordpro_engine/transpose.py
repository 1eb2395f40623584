"""Chromatic chord transposition.

Each chord is split into root, suffix and optional ``/bass`` using the chord
grammar in :mod:`chordpro_engine.chords`.  Root and bass are shifted by the
same number of semitones; the suffix (``m7b5``, ``sus4``, ``(add9)``) is
reattached untouched.

Spelling of the shifted notes follows the target key's signature:

  sharps   C G D A E B F# C#, Am Em Bm F#m C#m G#m D#m A#m
  flats    F Bb Eb Ab Db Gb Cb, Dm Gm Cm Fm Bbm Ebm Abm
  other    theoretical keys (G#, Fb, ...) follow their own accidental

Symbols outside the grammar (``X``, ``N.C.``, ``???``) are passed through.
"""

import logging
import re
from collections.abc import Iterable

from .chords import CHORD_RE, scan_chord_tokens
from .directives import DIRECTIVE_TOKEN_RE, canonical_name, parse_directive
from .exceptions import UnknownKeyError

logger = logging.getLogger(__name__)

SHARP_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
FLAT_NAMES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

_NATURALS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_ACCIDENTALS = {"": 0, "#": 1, "b": -1}

SHARP_KEYS = frozenset({
    "C", "G", "D", "A", "E", "B", "F#", "C#",
    "Am", "Em", "Bm", "F#m", "C#m", "G#m", "D#m", "A#m",
})
FLAT_KEYS = frozenset({
    "F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb",
    "Dm", "Gm", "Cm", "Fm", "Bbm", "Ebm", "Abm",
})

_NOTE_RE = re.compile(r"^([A-G])([#b]?)$")
_KEY_RE = re.compile(r"^\s*([A-G][#b]?)\s*(m|min|minor|maj|major)?\s*$")


def note_index(name: str) -> int | None:
    """Return the pitch class (0 = C) of a note name like ``F#`` or ``Bb``."""
    m = _NOTE_RE.match(name)
    if not m:
        return None
    return (_NATURALS[m.group(1)] + _ACCIDENTALS[m.group(2)]) % 12


def _parse_key(key: str) -> tuple[str, bool] | None:
    m = _KEY_RE.match(key)
    if not m:
        return None
    return m.group(1), m.group(2) in ("m", "min", "minor")


def key_root(key: str) -> int | None:
    """Return the pitch class of a key's tonic (``"F#m"`` -> 6)."""
    parsed = _parse_key(key)
    return note_index(parsed[0]) if parsed else None


def prefers_flats(key: str) -> bool:
    """Return True if notes should be spelled with flats in *key*."""
    parsed = _parse_key(key)
    if parsed is None:
        return False
    root, minor = parsed
    name = root + ("m" if minor else "")
    if name in FLAT_KEYS:
        return True
    if name in SHARP_KEYS:
        return False
    return root.endswith("b")


def semitone_delta(source_key: str, target_key: str) -> int:
    """Return the upward shift in semitones (0-11) from *source_key* to *target_key*.

    Raises :class:`~chordpro_engine.exceptions.UnknownKeyError` if either key
    has no recognisable root.
    """
    source = key_root(source_key)
    if source is None:
        raise UnknownKeyError(source_key)
    target = key_root(target_key)
    if target is None:
        raise UnknownKeyError(target_key)
    return (target - source) % 12


def _spell(index: int, prefer_flats: bool) -> str:
    names = FLAT_NAMES if prefer_flats else SHARP_NAMES
    return names[index % 12]


def transpose_chord(chord: str, semitones: int, prefer_flats: bool = False) -> str:
    """Shift one chord symbol by *semitones*.

    Symbols that are not chords, and any symbol when the shift is a whole
    number of octaves, come back unchanged.
    """
    m = CHORD_RE.match(chord)
    if m is None or semitones % 12 == 0:
        return chord

    result = _spell(note_index(m.group("root")) + semitones, prefer_flats) + m.group("suffix")
    if m.group("bass"):
        bass = _spell(note_index(m.group("bass")) + semitones, prefer_flats)
        result += "/" + bass + (m.group("bass_suffix") or "")
    return result


def transpose_chords(chords: Iterable[str], source_key: str, target_key: str) -> list[str]:
    """Transpose *chords* from *source_key* to *target_key*, one output per input.

    Unrecognised chords keep their position unchanged.  If either key is
    unrecognised nothing is transposed.
    """
    chords = list(chords)
    try:
        delta = semitone_delta(source_key, target_key)
    except UnknownKeyError as exc:
        logger.warning("Leaving %d chord(s) untransposed: %s", len(chords), exc)
        return chords

    flats = prefers_flats(target_key)
    return [transpose_chord(chord, delta, flats) for chord in chords]


def transpose_text(text: str, source_key: str, target_key: str) -> str:
    """Rewrite every inline ``[chord]`` in *text* in place.

    A ``{key: ...}`` directive naming *source_key* becomes *target_key*,
    spelled as given; one naming some other key has its tonic shifted like a
    chord root.  Other directives, section headers and lyrics are left
    exactly as they were.
    """
    try:
        delta = semitone_delta(source_key, target_key)
    except UnknownKeyError as exc:
        logger.warning("Leaving text untransposed: %s", exc)
        return text
    if delta == 0:
        return text

    flats = prefers_flats(target_key)
    edits = [
        (token.offset, token.offset + len(token.symbol), transpose_chord(token.symbol, delta, flats))
        for token in scan_chord_tokens(text)
    ]
    edits.extend(_key_directive_edits(text, source_key, target_key, delta, flats))
    edits.sort()

    parts: list[str] = []
    last = 0
    for start, end, replacement in edits:
        if start < last:
            continue  # a brace inside a bracket capture; the chord edit wins
        parts.append(text[last:start])
        parts.append(replacement)
        last = end
    parts.append(text[last:])
    return "".join(parts)


def _key_directive_edits(text, source_key, target_key, delta, flats):
    source = _parse_key(source_key)
    source = (note_index(source[0]), source[1])
    for match in DIRECTIVE_TOKEN_RE.finditer(text):
        directive = parse_directive(match.group(1))
        if directive is None or canonical_name(directive.name) != "key" or not directive.value:
            continue
        parsed = _parse_key(directive.value)
        if parsed is None:
            continue
        root, minor = parsed
        if (note_index(root), minor) == source:
            new_value = target_key.strip()
        else:
            new_value = _spell(note_index(root) + delta, flats) + directive.value[len(root):]
        body = match.group(1)
        after_colon = body.index(":") + 1
        start = match.start(1) + after_colon + len(body[after_colon:]) - len(body[after_colon:].lstrip())
        yield start, start + len(directive.value), new_value
