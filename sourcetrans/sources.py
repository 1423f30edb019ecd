"""Reading and writing source files."""

from __future__ import annotations

import codecs
import pathlib

from .errors import SourceEncodingError, SourceTransError

TRANSLATED_MARKER = ".TRANSLATED"


def derive_output_path(input_path: pathlib.Path) -> pathlib.Path:
    """Return ``<stem>.TRANSLATED<suffix>`` next to the input file."""

    return input_path.with_name(f"{input_path.stem}{TRANSLATED_MARKER}{input_path.suffix}")


def check_encoding(name: str) -> str:
    """Return the canonical codec name or raise for unknown encodings."""

    try:
        return codecs.lookup(name).name
    except LookupError as exc:
        raise SourceEncodingError(f"Unknown text encoding '{name}'.") from exc


class SourceFile:
    """A source file decoded with a fixed encoding."""

    def __init__(self, path: pathlib.Path, encoding: str) -> None:
        self.path = path
        self.encoding = check_encoding(encoding)
        self.text = self._load()

    def _load(self) -> str:
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise SourceTransError(f"Could not read {self.path}: {exc}") from exc
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise SourceEncodingError(
                f"{self.path.name} is not valid {self.encoding} text "
                f"(byte offset {exc.start}). Pass --source-encoding to override."
            ) from exc

    def save(self, destination: pathlib.Path, text: str, encoding: str) -> None:
        """Encode and write the text without newline translation."""

        codec = check_encoding(encoding)
        try:
            payload = text.encode(codec)
        except UnicodeEncodeError as exc:
            raise SourceEncodingError(
                f"The translated text cannot be written as {codec} "
                f"(character {exc.object[exc.start:exc.end]!r}). "
                "Pass --output-encoding to override."
            ) from exc
        try:
            destination.write_bytes(payload)
        except OSError as exc:
            raise SourceTransError(f"Could not write {destination}: {exc}") from exc
