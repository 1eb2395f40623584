import json
from unittest.mock import patch

from click.testing import CliRunner

from chordpro_engine.cli import main
from chordpro_engine.codec import encode
from chordpro_engine.exceptions import FetchError

SONG = """{title: Amazing Grace}
{key: G}
{tempo: 90}

[Verse 1]
[G]Amazing [C]grace how [D]sweet the [G]sound

[Chorus]
[Em]Praise [C]God
"""


def _invoke(args, song=SONG):
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open("song.cho", "w", encoding="utf-8") as fh:
            fh.write(song)
        return runner.invoke(main, args)


# ---------------------------------------------------------------------------
# --help
# ---------------------------------------------------------------------------


def test_help_output():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "Inspect and rewrite ChordPro songs" in result.output
    for command in ("normalize", "validate", "meta", "chords", "sections", "transpose", "pack", "unpack"):
        assert command in result.output


# ---------------------------------------------------------------------------
# Text commands
# ---------------------------------------------------------------------------


def test_normalize():
    result = _invoke(["normalize", "song.cho"], song="\n{TITLE:Hymn}\n  [G]line  \n\n")
    assert result.exit_code == 0
    assert result.output == "{title: Hymn}\n[G]line\n"


def test_validate_ok():
    result = _invoke(["validate", "song.cho"])
    assert result.exit_code == 0
    assert result.output.strip() == "OK"


def test_validate_reports_errors():
    result = _invoke(["validate", "song.cho"], song="{title: X}\n[G]broken [C\n")
    assert result.exit_code == 1
    assert "unmatched '[' on line 2" in result.output


def test_meta_json():
    result = _invoke(["meta", "song.cho"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"title": "Amazing Grace", "key": "G", "tempo": 90}


def test_chords():
    result = _invoke(["chords", "song.cho"])
    assert result.output.strip() == "G C D Em"


def test_sections():
    result = _invoke(["sections", "song.cho"])
    assert result.output.splitlines() == ["Verse 1: G C D", "Chorus: Em C"]


def test_stdin_source():
    result = CliRunner().invoke(main, ["chords", "-"], input="[A]one [E]two")
    assert result.output.strip() == "A E"


# ---------------------------------------------------------------------------
# transpose
# ---------------------------------------------------------------------------


def test_transpose_uses_key_directive():
    result = _invoke(["transpose", "song.cho", "--to", "A"])
    assert result.exit_code == 0
    assert "[A]Amazing [D]grace how [E]sweet the [A]sound" in result.output
    assert "[F#m]Praise" in result.output
    assert "{key: A}" in result.output
    assert "{key: G}" not in result.output


def test_transpose_explicit_from():
    result = _invoke(["transpose", "song.cho", "--from", "G", "--to", "F"])
    assert "[F]Amazing [Bb]grace" in result.output


def test_transpose_without_source_key():
    result = _invoke(["transpose", "song.cho", "--to", "A"], song="[G]no key here")
    assert result.exit_code == 1
    assert "{key}" in result.output


def test_transpose_unknown_key():
    result = _invoke(["transpose", "song.cho", "--to", "H"])
    assert result.exit_code == 1
    assert "Unrecognized key" in result.output


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def test_missing_file():
    result = CliRunner().invoke(main, ["chords", "does-not-exist.cho"])
    assert result.exit_code == 1
    assert "Could not read does-not-exist.cho" in result.output


def test_url_fetch_error():
    url = "https://example.com/song.cho"
    with patch("chordpro_engine.cli.load_source", side_effect=FetchError(url, 403)):
        result = CliRunner().invoke(main, ["chords", url])
    assert result.exit_code == 1
    assert "Could not fetch https://example.com/song.cho (HTTP 403)" in result.output


# ---------------------------------------------------------------------------
# pack / unpack
# ---------------------------------------------------------------------------


def test_pack_and_unpack(tmp_path):
    value = {"chords": ["C", "F", "G"], "progression": ["C", "F"] * 200, "capo": None}
    src = tmp_path / "value.json"
    src.write_text(json.dumps(value), encoding="utf-8")
    blob = tmp_path / "value.bin"

    result = CliRunner().invoke(main, ["pack", str(src), "-o", str(blob)])
    assert result.exit_code == 0
    assert "Written to" in result.output

    result = CliRunner().invoke(main, ["unpack", str(blob)])
    assert result.exit_code == 0
    assert json.loads(result.output) == value


def test_pack_invalid_json(tmp_path):
    src = tmp_path / "bad.json"
    src.write_text("{not json", encoding="utf-8")
    result = CliRunner().invoke(main, ["pack", str(src), "-o", str(tmp_path / "out.bin")])
    assert result.exit_code == 1
    assert "is not valid JSON" in result.output


def test_unpack_foreign_blob(tmp_path):
    blob = tmp_path / "junk.bin"
    blob.write_bytes(b"invalid compressed data")
    result = CliRunner().invoke(main, ["unpack", str(blob)])
    assert result.exit_code == 1
    assert "Not a compact codec buffer" in result.output


def test_unpack_null(tmp_path):
    blob = tmp_path / "null.bin"
    blob.write_bytes(encode(None))
    result = CliRunner().invoke(main, ["unpack", str(blob)])
    assert result.output.strip() == "null"
