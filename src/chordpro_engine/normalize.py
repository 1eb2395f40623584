import re

from .directives import DIRECTIVE_LINE_RE, parse_directive

_LINE_BREAK_RE = re.compile(r"\r\n|\r")


def normalize_content(text: str) -> str:
    """Return *text* in canonical ChordPro layout.

    - ``\\r\\n`` and ``\\r`` become ``\\n``
    - every line is stripped
    - leading and trailing blank lines are dropped (interior ones are kept)
    - directive lines become ``{name: value}`` with a lower-case name

    Never raises; empty input gives an empty string.
    """
    lines = [_normalize_line(line.strip()) for line in _LINE_BREAK_RE.sub("\n", text).split("\n")]

    start = 0
    while start < len(lines) and not lines[start]:
        start += 1
    end = len(lines)
    while end > start and not lines[end - 1]:
        end -= 1

    return "\n".join(lines[start:end])


def _normalize_line(line: str) -> str:
    m = DIRECTIVE_LINE_RE.match(line)
    if not m:
        return line

    directive = parse_directive(m.group(1))
    if directive is None:
        return line  # {: value} has nothing to canonicalise

    if directive.has_colon:
        if not directive.value:
            return f"{{{directive.name}:}}"
        return f"{{{directive.name}: {directive.value}}}"

    # Colon-less: only a single word is a flag directive; leave prose alone.
    if any(ch.isspace() for ch in directive.name):
        return line
    return f"{{{directive.name}}}"
