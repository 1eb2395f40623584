"""Line-by-line ChordPro syntax checks.

Every problem is reported as a :class:`~chordpro_engine.models.ValidationIssue`
whose message carries a stable keyword and the line number:

    malformed directive on line N: unclosed '{'          {title: Song
    malformed directive on line N: unexpected '}'        title}
    malformed directive on line N: empty directive name  {: Song}
    malformed directive on line N: missing ':' after ..  {title Song}
    unmatched '[' on line N                              [Am lyric
    unmatched ']' on line N                              lyric C]

Flag directives such as ``{soc}`` or ``{start_of_verse}`` need no colon.

Brackets inside a directive body are not checked.  Directives never span
lines: an unclosed ``{`` is reported on the line that opened it and the next
line starts fresh.
"""

import re

from .directives import is_flag_directive, parse_directive
from .models import ValidationIssue, ValidationReport

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def validate_syntax(text: str) -> ValidationReport:
    """Check *text* and return a report of every problem found, in line order.

    Empty input is valid.  Never raises.
    """
    if not text:
        return ValidationReport()

    errors: list[ValidationIssue] = []
    for number, line in enumerate(_LINE_BREAK_RE.split(text), start=1):
        errors.extend(ValidationIssue(number, message) for message in _check_line(line, number))
    return ValidationReport(errors=tuple(errors))


def _check_line(line: str, number: int) -> list[str]:
    problems: list[str] = []
    brace_start = -1  # index of the open '{', -1 when outside a directive
    bracket_open = False

    for i, ch in enumerate(line):
        if brace_start >= 0:
            if ch == "}":
                problem = _check_directive_body(line[brace_start + 1:i])
                if problem:
                    problems.append(f"malformed directive on line {number}: {problem}")
                brace_start = -1
            continue

        if ch == "{":
            if bracket_open:
                problems.append(f"unmatched '[' on line {number}")
                bracket_open = False
            brace_start = i
        elif ch == "}":
            problems.append(f"malformed directive on line {number}: unexpected '}}'")
        elif ch == "[":
            if bracket_open:
                problems.append(f"unmatched '[' on line {number}")
            bracket_open = True
        elif ch == "]":
            if bracket_open:
                bracket_open = False
            else:
                problems.append(f"unmatched ']' on line {number}")

    if brace_start >= 0:
        problems.append(f"malformed directive on line {number}: unclosed '{{'")
    if bracket_open:
        problems.append(f"unmatched '[' on line {number}")
    return problems


def _check_directive_body(body: str) -> str | None:
    directive = parse_directive(body)
    if directive is None:
        return "empty directive name"
    if not directive.has_colon and not is_flag_directive(directive.name):
        return f"missing ':' after '{directive.name}'"
    return None
