"""Core data structures for the source comment translator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Optional

from .errors import InvalidModeError


TranslateFunction = Callable[[str], Optional[str]]
ProgressCallback = Callable[[int, int], None]

DEFAULT_MAX_TRANSLATION_CHARS = 800


class SpanKind(Enum):
    """Classification of a scanned token."""

    LITERAL = "literal"
    COMMENT = "comment"


class TranslationMode(IntEnum):
    """Controls how a translation is written back into a comment.

    The integer values are the mode selectors accepted on the command line.
    """

    ORIGINAL_THEN_TRANSLATION = 0
    TRANSLATION_ONLY = 1
    TRANSLATION_THEN_ORIGINAL = 2

    @classmethod
    def from_selector(cls, value: int | str) -> "TranslationMode":
        """Map a command line selector (``0``, ``1`` or ``2``) to a mode."""

        try:
            return cls(int(value))
        except (TypeError, ValueError) as exc:
            raise InvalidModeError(
                f"Invalid mode '{value}'. Use 0 to keep the original text before "
                "the translation, 1 for the translation only, or 2 to keep the "
                "original text after the translation."
            ) from exc


@dataclass(frozen=True)
class Span:
    """A located token of the source text, delimiters included."""

    start: int
    end: int
    kind: SpanKind
    raw_text: str

    @property
    def is_comment(self) -> bool:
        return self.kind is SpanKind.COMMENT


@dataclass(frozen=True)
class TranslationOptions:
    """Options injected into the substitution entry point."""

    direction: str
    mode: TranslationMode = TranslationMode.TRANSLATION_ONLY
    use_corrector: bool = True
    max_chars: int = DEFAULT_MAX_TRANSLATION_CHARS
    workers: int = 1


@dataclass
class SubstitutionOutcome:
    """Rewritten text plus counters for reporting."""

    text: str
    total_spans: int
    comment_spans: int
    substituted: int
