import json
import logging
import sys
from pathlib import Path

import click

from .chords import parse_chord_progression
from .codec import DEFAULT_COMPRESSION_LEVEL, CompactCodec
from .directives import extract_metadata
from .exceptions import DecodeError, EncodeError, FetchError, ParseError, UnknownKeyError
from .loader import FETCH_TIMEOUT, load_source
from .normalize import normalize_content
from .sections import extract_sections
from .transpose import semitone_delta, transpose_text
from .validator import validate_syntax


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _read(ctx: click.Context, location: str) -> str:
    """Load *location*, turning loader failures into a clean CLI error."""
    try:
        return load_source(location, timeout=ctx.obj["timeout"])
    except FetchError as exc:
        msg = f"Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        _fail(msg)
    except ParseError as exc:
        _fail(str(exc))
    except OSError as exc:
        _fail(f"Could not read {location}: {exc.strerror or exc}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
@click.option("--timeout", default=FETCH_TIMEOUT, show_default=True, type=float,
              help="Seconds to wait when SOURCE is a URL.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, timeout: float) -> None:
    """Inspect and rewrite ChordPro songs.

    \b
    SOURCE may be a file path, "-" for stdin, or an http(s) URL.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["timeout"] = timeout


@main.command()
@click.argument("source")
@click.pass_context
def normalize(ctx: click.Context, source: str) -> None:
    """Print SOURCE in canonical ChordPro layout."""
    click.echo(normalize_content(_read(ctx, source)))


@main.command()
@click.argument("source")
@click.pass_context
def validate(ctx: click.Context, source: str) -> None:
    """Check SOURCE for malformed directives and unmatched brackets."""
    report = validate_syntax(_read(ctx, source))
    if report.is_valid:
        click.echo("OK")
        return
    for issue in report.errors:
        click.echo(issue.message)
    sys.exit(1)


@main.command()
@click.argument("source")
@click.pass_context
def meta(ctx: click.Context, source: str) -> None:
    """Print the metadata directives of SOURCE as JSON."""
    metadata = extract_metadata(_read(ctx, source))
    click.echo(json.dumps(metadata.as_dict(), ensure_ascii=False, indent=2))


@main.command()
@click.argument("source")
@click.pass_context
def chords(ctx: click.Context, source: str) -> None:
    """Print the unique chords of SOURCE in order of appearance."""
    click.echo(" ".join(parse_chord_progression(_read(ctx, source))))


@main.command()
@click.argument("source")
@click.pass_context
def sections(ctx: click.Context, source: str) -> None:
    """Print each section of SOURCE with its chords."""
    for section in extract_sections(_read(ctx, source)):
        click.echo(f"{section.name}: {' '.join(section.chords)}".rstrip())


@main.command()
@click.argument("source")
@click.option("--from", "source_key", default=None, metavar="KEY",
              help="Key SOURCE is written in (default: its {key} directive).")
@click.option("--to", "target_key", required=True, metavar="KEY", help="Key to transpose to.")
@click.pass_context
def transpose(ctx: click.Context, source: str, source_key: str | None, target_key: str) -> None:
    """Print SOURCE with every chord moved to another key."""
    text = _read(ctx, source)
    source_key = source_key or extract_metadata(text).key
    if not source_key:
        _fail("No --from key given and SOURCE has no {key} directive")

    # The library degrades silently on bad keys; the CLI should not.
    try:
        semitone_delta(source_key, target_key)
    except UnknownKeyError as exc:
        _fail(str(exc))

    click.echo(transpose_text(text, source_key, target_key), nl=False)


@main.command()
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output_path", required=True, metavar="PATH",
              type=click.Path(dir_okay=False, path_type=Path), help="Where to write the blob.")
@click.option("--level", default=DEFAULT_COMPRESSION_LEVEL, show_default=True,
              help="zstd compression level.")
def pack(json_file: Path, output_path: Path, level: int) -> None:
    """Compress the JSON value in JSON_FILE into a compact blob."""
    try:
        value = json.loads(json_file.read_text(encoding="utf-8"))
    except ValueError as exc:
        _fail(f"{json_file} is not valid JSON: {exc}")

    codec = CompactCodec(level=level)
    try:
        blob = codec.encode(value)
    except EncodeError as exc:
        _fail(str(exc))

    output_path.write_bytes(blob)
    metrics = codec.metrics(value)
    click.echo(
        f"Written to {output_path} ({metrics.original_size} -> "
        f"{metrics.compressed_size} bytes, {metrics.ratio}% saved)"
    )


@main.command()
@click.argument("blob", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def unpack(blob: Path) -> None:
    """Print the JSON value stored in BLOB."""
    try:
        value = CompactCodec().decode(blob.read_bytes())
    except DecodeError as exc:
        _fail(str(exc))
    click.echo(json.dumps(value, ensure_ascii=False, indent=2))
