"""Comment substitution: translate comment spans and reassemble the text."""

from __future__ import annotations

import concurrent.futures
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .scanner import scan
from .structures import (
    ProgressCallback,
    Span,
    SubstitutionOutcome,
    TranslateFunction,
    TranslationMode,
    TranslationOptions,
)

TRIM_CHARACTERS = "\\/-*_ \t\n\r"
EQUALITY_TRIM_CHARACTERS = "._"


def extract_candidate(raw_text: str) -> Optional[Tuple[int, str]]:
    """Return the offset and text of the translatable part of a comment.

    Comment delimiters, decoration and surrounding whitespace are trimmed.
    Returns ``None`` when nothing is left or when the remainder starts with a
    quote.
    """

    stripped_left = raw_text.lstrip(TRIM_CHARACTERS)
    candidate = stripped_left.rstrip(TRIM_CHARACTERS)
    if not candidate or candidate.startswith('"'):
        return None
    return len(raw_text) - len(stripped_left), candidate


def is_meaningful_translation(candidate: str, translation: Optional[str]) -> bool:
    """Decide whether a translation differs enough from its source."""

    if translation is None or not translation.strip():
        return False
    source_key = candidate.strip(EQUALITY_TRIM_CHARACTERS).casefold()
    translated_key = translation.strip(EQUALITY_TRIM_CHARACTERS).casefold()
    return source_key != translated_key


def format_translation(candidate: str, translation: str, mode: TranslationMode) -> str:
    if mode is TranslationMode.ORIGINAL_THEN_TRANSLATION:
        return f"{candidate} - {translation}"
    if mode is TranslationMode.TRANSLATION_THEN_ORIGINAL:
        return f"{translation} - {candidate}"
    return translation


def substitute(
    text: str,
    spans: Sequence[Span],
    mode: TranslationMode,
    translate: TranslateFunction,
    progress: ProgressCallback | None = None,
) -> SubstitutionOutcome:
    """Translate comment spans and rebuild the text around them.

    Skipped spans never move the cursor, so their bytes are copied verbatim
    as part of the next gap or the final tail.
    """

    parts: List[str] = []
    cursor = 0
    total = len(spans)
    comment_spans = 0
    substituted = 0

    for index, span in enumerate(spans, start=1):
        if progress is not None:
            progress(index, total)
        if not span.is_comment:
            continue
        comment_spans += 1

        extracted = extract_candidate(span.raw_text)
        if extracted is None:
            continue
        offset, candidate = extracted

        translation = translate(candidate)
        if not is_meaningful_translation(candidate, translation):
            continue

        replacement = format_translation(candidate, translation, mode)  # type: ignore[arg-type]
        parts.append(text[cursor:span.start])
        parts.append(span.raw_text[:offset])
        parts.append(replacement)
        parts.append(span.raw_text[offset + len(candidate):])
        cursor = span.end
        substituted += 1

    parts.append(text[cursor:])
    return SubstitutionOutcome(
        text="".join(parts),
        total_spans=total,
        comment_spans=comment_spans,
        substituted=substituted,
    )


def process(
    text: str,
    spans: Sequence[Span],
    mode: TranslationMode,
    translate: TranslateFunction,
    progress: ProgressCallback | None = None,
) -> str:
    """Return only the rewritten text of :func:`substitute`."""

    return substitute(text, spans, mode, translate, progress=progress).text


def collect_candidates(spans: Iterable[Span]) -> List[str]:
    """List the distinct candidates of the comment spans in document order."""

    seen: Dict[str, None] = {}
    for span in spans:
        if not span.is_comment:
            continue
        extracted = extract_candidate(span.raw_text)
        if extracted is not None:
            seen.setdefault(extracted[1], None)
    return list(seen)


def prefetch_translations(
    candidates: Sequence[str],
    translate: TranslateFunction,
    workers: int,
    progress: ProgressCallback | None = None,
) -> Dict[str, Optional[str]]:
    """Translate candidates concurrently and return them keyed by candidate.

    ``progress`` receives the number of finished requests as they complete.
    The first failing request cancels every request that has not started yet
    and is re-raised once the requests already running have returned.
    """

    results: Dict[str, Optional[str]] = {}
    if not candidates:
        return results
    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {
            executor.submit(translate, candidate): candidate for candidate in candidates
        }
        try:
            completed = concurrent.futures.as_completed(futures)
            for done, future in enumerate(completed, start=1):
                results[futures[future]] = future.result()
                if progress is not None:
                    progress(done, len(futures))
        except BaseException:
            for pending in futures:
                pending.cancel()
            raise
    return results


def translate_comments(
    text: str,
    options: TranslationOptions,
    translate: TranslateFunction,
    progress: ProgressCallback | None = None,
) -> SubstitutionOutcome:
    """Scan the text and substitute translated comments.

    With more than one worker every candidate is translated up front and the
    reassembly pass reads from those results, keeping document order. Progress
    then counts finished requests instead of spans.
    """

    spans = scan(text)
    if not spans:
        return SubstitutionOutcome(text=text, total_spans=0, comment_spans=0, substituted=0)

    if options.workers > 1:
        cache = prefetch_translations(
            collect_candidates(spans), translate, options.workers, progress=progress
        )
        return substitute(text, spans, options.mode, cache.__getitem__)

    return substitute(text, spans, options.mode, translate, progress=progress)
