import pytest

from chordpro_engine.chords import (
    has_chords,
    is_chord,
    is_section_label,
    parse_chord_progression,
    scan_chord_tokens,
)

# ---------------------------------------------------------------------------
# Chord grammar
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("symbol", [
    "C", "Am", "Am7", "Cmaj7", "G/B", "D/F#", "F#m", "Bb7sus4", "Am7b5",
    "Ddim", "C#°7", "Caug", "C6/9", "C(add9)/E(b5)", "E7#9", "CM7",
])
def test_is_chord(symbol):
    assert is_chord(symbol)


@pytest.mark.parametrize("symbol", ["X", "InvalidChord", "???", "Verse", "Bridge", "Empty Section", "N.C."])
def test_is_not_chord(symbol):
    assert not is_chord(symbol)


def test_long_digit_run_fails_quickly():
    assert not is_chord("C" + "1" * 40 + "x")


def test_section_labels():
    assert is_section_label("Verse 1")
    assert is_section_label("Chorus")
    assert not is_section_label("Am")
    assert not is_section_label("G/B")
    assert not is_section_label("123")


# ---------------------------------------------------------------------------
# scan_chord_tokens
# ---------------------------------------------------------------------------


def test_tokens_carry_positions():
    text = "{title: X}\nThe [G]sound that [D]saved"
    tokens = scan_chord_tokens(text)
    assert [t.symbol for t in tokens] == ["G", "D"]
    assert (tokens[0].line, tokens[0].column) == (2, 5)
    for token in tokens:
        assert text[token.offset:token.offset + len(token.symbol)] == token.symbol


def test_tokens_keep_repeats():
    assert [t.symbol for t in scan_chord_tokens("[G]a [G]b")] == ["G", "G"]


def test_crlf_counts_as_one_line_break():
    tokens = scan_chord_tokens("[G]one\r\n[C]two\r[D]three")
    assert [(t.symbol, t.line) for t in tokens] == [("G", 1), ("C", 2), ("D", 3)]


def test_unterminated_bracket_dropped_at_end_of_line():
    tokens = scan_chord_tokens("[Am Incomplete chord bracket\n[C]Valid")
    assert [t.symbol for t in tokens] == ["C"]


def test_unterminated_bracket_dropped_at_end_of_text():
    assert scan_chord_tokens("[C]Valid [D]chord then [broken") == scan_chord_tokens("[C]Valid [D]chord")[:2]


def test_reopened_bracket_discards_first_capture():
    assert [t.symbol for t in scan_chord_tokens("[Am [G]word")] == ["G"]


def test_brackets_inside_directives_ignored():
    assert scan_chord_tokens("{comment: play [G] softly}") == []


def test_empty_brackets_ignored():
    assert scan_chord_tokens("[] [  ] lyric") == []


# ---------------------------------------------------------------------------
# parse_chord_progression
# ---------------------------------------------------------------------------


def test_unique_chords():
    content = "[G]Amazing [C]grace how [D]sweet the [G]sound\nThat [G]saved a [D]wretch like [G]me"
    assert parse_chord_progression(content) == ["G", "C", "D"]


def test_first_occurrence_order():
    assert parse_chord_progression("[G]First [Am]second [C]third [G]first again") == ["G", "Am", "C"]


def test_complex_chords_are_opaque():
    content = (
        "[Cmaj7]Complex [G/B]slash [Am7b5]extended [Ddim]diminished\n"
        "[F#m]Minor [Bb7sus4]suspended [C#°7]diminished seventh"
    )
    assert parse_chord_progression(content) == [
        "Cmaj7", "G/B", "Am7b5", "Ddim", "F#m", "Bb7sus4", "C#°7",
    ]


def test_nested_parentheses_chord():
    assert parse_chord_progression("[C(add9)/E(b5)]Test content") == ["C(add9)/E(b5)"]


def test_section_markers_and_comments_ignored():
    content = (
        "{comment: Verse 1}\n[Verse]\n[G]Line with [C]chords\n"
        "{comment: This is a comment}\n[Chorus]\n[Am]Another [F]line with [G]chords"
    )
    assert parse_chord_progression(content) == ["G", "C", "Am", "F"]


def test_lone_chord_on_line_is_a_chord():
    assert parse_chord_progression("[Am]\nlyric") == ["Am"]


def test_empty_and_chordless_content():
    assert parse_chord_progression("") == []
    assert parse_chord_progression("Just lyrics with no chords") == []


def test_very_long_line():
    content = "[C]" + "word " * 10000 + "[G]end"
    assert parse_chord_progression(content) == ["C", "G"]


# ---------------------------------------------------------------------------
# has_chords
# ---------------------------------------------------------------------------


def test_has_chords():
    assert has_chords("[G]Amazing grace")
    assert not has_chords("[Verse]\nJust lyrics")
    assert not has_chords("[???] lyric")
