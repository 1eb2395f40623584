"""Compact binary codec for JSON-compatible values.

Values are serialised as compact UTF-8 JSON and wrapped in a zstd frame.
Nothing here knows about ChordPro; the same codec stores cached chord
progressions and arbitrary arrangement metadata.

Usage::

    from chordpro_engine.codec import decode, encode
    blob = encode({"chords": ["C", "F", "G"], "capo": None})
    decode(blob)
"""

import json
import logging

import zstandard

from .exceptions import DecodeError, EncodeError
from .models import CompressionMetrics

logger = logging.getLogger(__name__)

DEFAULT_COMPRESSION_LEVEL = 3


class CompactCodec:
    """Encode JSON-compatible values to zstd-compressed bytes and back."""

    def __init__(self, level: int = DEFAULT_COMPRESSION_LEVEL):
        self.level = level

    def encode(self, value) -> bytes:
        """Return the compressed form of *value*.

        Raises :class:`~chordpro_engine.exceptions.EncodeError` for values
        JSON cannot represent (sets, bytes, NaN, non-string keys, ...).
        """
        raw = _dump(value)
        compressed = zstandard.ZstdCompressor(level=self.level).compress(raw)
        logger.debug(
            "Encoded %d bytes to %d bytes (%.2f%% saved)",
            len(raw),
            len(compressed),
            _ratio(len(raw), len(compressed)),
        )
        return compressed

    def decode(self, data):
        """Return the value stored in *data*.

        Raises :class:`~chordpro_engine.exceptions.DecodeError` if *data* was
        not produced by :meth:`encode`.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DecodeError(f"Expected a bytes-like object, got {type(data).__name__}")
        try:
            raw = zstandard.ZstdDecompressor().decompress(bytes(data))
            return json.loads(raw.decode("utf-8"))
        except (zstandard.ZstdError, UnicodeDecodeError, ValueError, RecursionError) as exc:
            logger.debug("Decode failed for %d byte buffer: %s", len(data), exc)
            raise DecodeError(f"Not a compact codec buffer: {exc}") from exc

    def metrics(self, value) -> CompressionMetrics:
        """Return size figures for storing *value* with this codec."""
        original = len(_dump(value))
        compressed = len(self.encode(value))
        return CompressionMetrics(
            original_size=original,
            compressed_size=compressed,
            ratio=round(_ratio(original, compressed), 2),
            savings=original - compressed,
        )


def _dump(value) -> bytes:
    try:
        text = json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodeError(f"Value is not JSON-compatible: {exc}") from exc
    _check_keys(value)
    return text.encode("utf-8")


def _check_keys(value) -> None:
    # json.dumps stringifies int/float/bool/None keys, which would not decode
    # back to the same value.  Runs after dumps, so the value has no cycles.
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, dict):
            for key, child in item.items():
                if not isinstance(key, str):
                    raise EncodeError(
                        f"Object keys must be strings, got {type(key).__name__} {key!r}"
                    )
                stack.append(child)
        elif isinstance(item, (list, tuple)):
            stack.extend(item)


def _ratio(original: int, compressed: int) -> float:
    if not original:
        return 0.0
    return (1 - compressed / original) * 100


_default_codec = CompactCodec()


def encode(value) -> bytes:
    return _default_codec.encode(value)


def decode(data):
    return _default_codec.decode(data)
