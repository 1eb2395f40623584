class ChordProEngineError(Exception):
    """Base exception for chordpro_engine."""


class CodecError(ChordProEngineError):
    """Base class for compact codec failures."""


class EncodeError(CodecError):
    """Raised when a value cannot be represented by the compact codec."""


class DecodeError(CodecError):
    """Raised when a byte buffer was not produced by the compact codec."""


class UnknownKeyError(ChordProEngineError, ValueError):
    """Raised when a key name has no recognizable root note."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unrecognized key: {key!r}")


class FetchError(ChordProEngineError):
    """Raised when an HTTP request for a ChordPro source fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} fetching {url}")


class ParseError(ChordProEngineError):
    """Raised when no ChordPro text can be pulled out of a fetched page."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Parse error for {source}: {reason}")
