from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType


@dataclass(frozen=True)
class Metadata:
    """Song metadata pulled from ``{name: value}`` directives.

    Every field is optional: a directive that is missing or malformed leaves
    its field as ``None`` rather than a default.  Directive names that are not
    known metadata, structural or formatting directives end up in ``custom``,
    a read-only mapping.
    """

    title: str | None = None
    subtitle: str | None = None
    artist: str | None = None
    composer: str | None = None
    lyricist: str | None = None
    key: str | None = None
    tempo: int | None = None
    time_signature: str | None = None
    capo: int | None = None
    year: int | None = None
    album: str | None = None
    genre: str | None = None
    copyright: str | None = None
    custom: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "custom", MappingProxyType(dict(self.custom)))

    def as_dict(self) -> dict:
        """Return only the fields that are present, custom fields merged in."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name != "custom" and value is not None:
                data[f.name] = value
        for name, value in self.custom.items():
            data.setdefault(name, value)
        return data


@dataclass(frozen=True)
class ChordToken:
    """A bracketed chord symbol and where it sits in the source text.

    ``line`` and ``column`` are 1-indexed (``column`` points at the opening
    ``[``).  ``offset`` is the absolute index of the symbol's first character,
    so ``text[offset:offset + len(symbol)] == symbol``.
    """

    symbol: str
    line: int
    column: int
    offset: int


@dataclass
class Section:
    """A named block of a song (verse, chorus, bridge, etc.)."""

    name: str  # e.g. "Verse 1", "Chorus", "Untitled" for the leading block
    lines: list[str] = field(default_factory=list)
    chords: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationIssue:
    line: int  # 1-indexed
    message: str


@dataclass(frozen=True)
class ValidationReport:
    """Result of a syntax check.  Valid exactly when there are no errors."""

    errors: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def messages(self) -> list[str]:
        return [issue.message for issue in self.errors]


@dataclass(frozen=True)
class CompressionMetrics:
    original_size: int
    compressed_size: int
    ratio: float  # percent saved, e.g. 87.5
    savings: int  # bytes
