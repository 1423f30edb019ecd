"""Command line interface for the source comment translator."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional, TextIO

from .directions import describe_directions, normalise_direction
from .errors import (
    InvalidDirectionError,
    InvalidModeError,
    SourceTransError,
    TranslationProviderConfigurationError,
    TranslationProviderError,
)
from .providers import TranslationProvider
from .sources import derive_output_path
from .structures import TranslationMode
from .translator import TranslationRunner, TranslationSummary, validate_paths


class ConsoleProgressBar:
    """Redraws a one-line progress bar for the spans being processed."""

    WIDTH = 30

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stderr

    def __call__(self, progress: int, total: int) -> None:
        filled = self.WIDTH * progress // total if total else self.WIDTH
        bar = "#" * filled + "." * (self.WIDTH - filled)
        self.stream.write(f"\r[{bar}] {progress} of {total} comments    ")
        if progress >= total:
            self.stream.write("\n")
        self.stream.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sourcetrans",
        description="Translate the comments of a C style source file.",
        epilog="Example: sourcetrans MY_HEADER.H jpn-eng 2",
    )
    parser.add_argument("path", help="C style source file path.")
    parser.add_argument(
        "direction",
        help=f"Translation direction: {describe_directions()}.",
    )
    parser.add_argument(
        "mode",
        help=(
            "0 to keep the original text before the translation, "
            "1 for the translation only, "
            "2 to keep the original text after the translation."
        ),
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file path. Defaults to <name>.TRANSLATED<extension>.",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider: reverso, openai, azure_openai or echo (default: reverso).",
    )
    parser.add_argument(
        "--no-corrector",
        dest="use_corrector",
        action="store_false",
        default=None,
        help="Ask the provider not to spell-correct the comment first.",
    )
    parser.add_argument(
        "--max-chars",
        type=int,
        help="Maximum characters per translation request (default: 800).",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        help="Concurrent translation requests (default: 1, sequential). With more than "
        "one, progress counts finished requests.",
    )
    parser.add_argument(
        "--source-encoding",
        help="Encoding of the input file. Defaults to cp932 for jpn-* directions, else utf-8.",
    )
    parser.add_argument(
        "--output-encoding",
        help="Encoding of the output file. Defaults to cp932 for *-jpn directions, else utf-8.",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow overwriting the output file if it already exists.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not draw the progress bar.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    return parser


def execute_translation(
    *,
    input_file: str,
    direction: str,
    mode: str | int,
    output_file: str | None = None,
    provider_name: str | None = None,
    provider: TranslationProvider | None = None,
    use_corrector: bool | None = None,
    max_chars: int | None = None,
    workers: int | None = None,
    source_encoding: str | None = None,
    output_encoding: str | None = None,
    force_overwrite: bool = False,
    show_progress: bool = True,
    verbose: bool = False,
    provider_debug: bool = False,
) -> tuple[int, TranslationSummary | None, str | None]:
    """Execute a translation run and return the exit code, summary, and message."""

    try:
        canonical_direction = normalise_direction(direction)
        translation_mode = TranslationMode.from_selector(mode)
    except (InvalidDirectionError, InvalidModeError) as exc:
        return 1, None, str(exc)

    input_path = pathlib.Path(input_file).expanduser().resolve()
    output_path = (
        pathlib.Path(output_file).expanduser().resolve()
        if output_file
        else derive_output_path(input_path)
    )

    try:
        validate_paths(input_path, output_path, force_overwrite=force_overwrite)
    except FileNotFoundError as exc:
        return 1, None, str(exc)
    except SourceTransError as exc:
        return 1, None, str(exc)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    runner = TranslationRunner(
        input_path=input_path,
        output_path=output_path,
        direction=canonical_direction,
        mode=translation_mode,
        provider_name=provider_name,
        provider=provider,
        use_corrector=use_corrector,
        max_chars=max_chars,
        workers=workers,
        input_encoding=source_encoding,
        output_encoding=output_encoding,
        verbose=verbose,
        provider_debug=provider_debug,
        progress=ConsoleProgressBar() if show_progress else None,
    )

    try:
        summary = runner.run()
    except TranslationProviderConfigurationError as exc:
        return 1, None, str(exc)
    except TranslationProviderError as exc:
        return 1, None, f"{exc}\nNo output file was written."
    except SourceTransError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."
    except Exception as exc:  # pragma: no cover - defensive catch
        error_message = (
            f"{exc}\n"
            "An unexpected error occurred. Please rerun with --verbose for more details."
        )
        return 1, None, error_message

    return 0, summary, None


def print_summary(summary: TranslationSummary, *, verbose: bool = False) -> None:
    """Output a friendly report once processing completes."""

    print(f"\n{summary.output_path.name} generated.")
    print(
        "  Comments:        "
        f"{summary.translated_comments} translated / {summary.comment_spans} total "
        f"({summary.skipped_comments} unchanged)"
    )
    print(f"  Direction:       {summary.direction}")
    print(f"  Mode:            {summary.mode.value} ({summary.mode.name.lower()})")
    print(f"  Provider:        {summary.provider_name}")
    if verbose:
        print(f"  Input file:      {summary.input_path}")
        print(f"  Output file:     {summary.output_path}")
        print(
            f"  Encodings:       {summary.source_encoding} -> {summary.output_encoding}"
        )
        print(f"  Workers:         {summary.workers}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    exit_code, summary, message = execute_translation(
        input_file=args.path,
        direction=args.direction,
        mode=args.mode,
        output_file=args.output,
        provider_name=args.provider,
        use_corrector=args.use_corrector,
        max_chars=args.max_chars,
        workers=args.workers,
        source_encoding=args.source_encoding,
        output_encoding=args.output_encoding,
        force_overwrite=args.force,
        show_progress=not args.no_progress,
        verbose=args.verbose,
        provider_debug=args.debug_provider,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary, verbose=args.verbose)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
