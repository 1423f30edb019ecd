"""High-level orchestration for translating the comments of one file."""

from __future__ import annotations

import functools
import pathlib
import time
from dataclasses import dataclass

from .directions import destination_encoding, source_encoding
from .engine import translate_comments
from .errors import OverwriteRefusedError, SourceTransError
from .providers import TranslationProvider, build_provider
from .sources import SourceFile, check_encoding
from .structures import (
    DEFAULT_MAX_TRANSLATION_CHARS,
    ProgressCallback,
    TranslationMode,
    TranslationOptions,
)


def load_settings():
    """Return the layered configuration, loading it on first use."""

    from .configuration import get_settings

    return get_settings()


@dataclass
class TranslationSummary:
    """Report returned after processing a source file."""

    input_path: pathlib.Path
    output_path: pathlib.Path
    direction: str
    mode: TranslationMode
    source_encoding: str
    output_encoding: str
    total_spans: int
    comment_spans: int
    translated_comments: int
    provider_name: str
    workers: int
    elapsed_seconds: float

    @property
    def skipped_comments(self) -> int:
        return self.comment_spans - self.translated_comments


class TranslationRunner:
    """Coordinates decoding, comment translation, and writing the result.

    Any provider failure propagates before the output file is written.
    """

    def __init__(
        self,
        *,
        input_path: pathlib.Path,
        output_path: pathlib.Path,
        direction: str,
        mode: TranslationMode,
        provider_name: str | None = None,
        provider: TranslationProvider | None = None,
        use_corrector: bool | None = None,
        max_chars: int | None = None,
        workers: int | None = None,
        input_encoding: str | None = None,
        output_encoding: str | None = None,
        verbose: bool = False,
        provider_debug: bool = False,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.input_path = input_path
        self.output_path = output_path
        self.direction = direction
        self.mode = mode
        self.provider_name = provider_name
        self.provider = provider
        self.use_corrector = use_corrector
        self.max_chars = max_chars
        self.workers = workers
        self.input_encoding = input_encoding or source_encoding(direction)
        self.output_encoding = output_encoding or destination_encoding(direction)
        self.verbose = verbose
        self.provider_debug = provider_debug
        self.progress = progress

    def _resolve_provider_and_options(self) -> tuple[TranslationProvider, TranslationOptions]:
        use_corrector = self.use_corrector
        max_chars = self.max_chars
        workers = self.workers
        provider = self.provider

        if provider is None:
            settings = load_settings()
            provider = build_provider(
                self.provider_name,
                settings=settings,
                debug=self.provider_debug or settings.SOURCETRANS_PROVIDER_DEBUG,
            )
            if use_corrector is None:
                use_corrector = settings.SOURCETRANS_USE_CORRECTOR
            if max_chars is None:
                max_chars = settings.SOURCETRANS_MAX_TRANSLATION_CHARS
            if workers is None:
                workers = settings.SOURCETRANS_WORKERS

        options = TranslationOptions(
            direction=self.direction,
            mode=self.mode,
            use_corrector=True if use_corrector is None else use_corrector,
            max_chars=max_chars or DEFAULT_MAX_TRANSLATION_CHARS,
            workers=max(1, workers or 1),
        )
        return provider, options

    def run(self) -> TranslationSummary:
        start_time = time.time()

        source = SourceFile(self.input_path, self.input_encoding)
        output_codec = check_encoding(self.output_encoding)
        provider, options = self._resolve_provider_and_options()

        translate = functools.partial(
            provider.translate,
            direction=options.direction,
            use_corrector=options.use_corrector,
            max_chars=options.max_chars,
        )
        outcome = translate_comments(source.text, options, translate, progress=self.progress)
        if self.verbose:
            print(
                f"\nFound {outcome.total_spans} tokens, "
                f"{outcome.comment_spans} comments, "
                f"{outcome.substituted} translated."
            )

        source.save(self.output_path, outcome.text, output_codec)

        return TranslationSummary(
            input_path=self.input_path,
            output_path=self.output_path,
            direction=options.direction,
            mode=options.mode,
            source_encoding=source.encoding,
            output_encoding=output_codec,
            total_spans=outcome.total_spans,
            comment_spans=outcome.comment_spans,
            translated_comments=outcome.substituted,
            provider_name=provider.name,
            workers=options.workers,
            elapsed_seconds=time.time() - start_time,
        )


def validate_paths(
    input_path: pathlib.Path,
    output_path: pathlib.Path,
    force_overwrite: bool,
) -> None:
    """Validate input/output path combinations and overwrite policy."""

    if not input_path.exists():
        raise FileNotFoundError(f"{input_path} not found.")
    if not input_path.is_file():
        raise SourceTransError("Input path must be a file.")

    if input_path.resolve() == output_path.resolve():
        raise OverwriteRefusedError(
            "The output path matches the input file. Refusing to overwrite the source file."
        )

    if output_path.exists() and not force_overwrite:
        raise OverwriteRefusedError(
            f"{output_path.name} already exists. Rename it or use --force to overwrite."
        )
