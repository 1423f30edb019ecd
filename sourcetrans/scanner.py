"""Locate comments and string literals in C-family source text."""

from __future__ import annotations

import re
from typing import Iterator, List

from .structures import Span, SpanKind

# Verbatim strings (@"..."@"..."), escaped double-quoted strings and
# character literals. Captured so a match can be classified as a literal.
LITERAL_PATTERN = (
    r'(?:@(?:"[^"]*")+)+'
    r'|"(?:[^"\n\\]|\\.)*"'
    r"|'(?:[^'\n\\]|\\.)*'"
)
COMMENT_PATTERN = r"//.*|/\*(?s:.*?)\*/"

# The literal alternative comes first so it wins at any shared start offset.
TOKEN_PATTERN = re.compile(
    rf"({LITERAL_PATTERN})|{COMMENT_PATTERN}",
    re.MULTILINE,
)


def iter_spans(text: str) -> Iterator[Span]:
    """Yield literal and comment spans from left to right."""

    for match in TOKEN_PATTERN.finditer(text):
        kind = SpanKind.LITERAL if match.group(1) is not None else SpanKind.COMMENT
        yield Span(
            start=match.start(),
            end=match.end(),
            kind=kind,
            raw_text=match.group(0),
        )


def scan(text: str) -> List[Span]:
    """Return every span of the text in ascending, non-overlapping order.

    An empty list means there is nothing to translate.
    """

    if not text:
        return []
    return list(iter_spans(text))
