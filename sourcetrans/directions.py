"""Translation direction allow-list and per-direction encodings."""

from __future__ import annotations

from typing import Dict, Tuple

from .errors import InvalidDirectionError

AVAILABLE_DIRECTIONS: Tuple[str, ...] = (
    "jpn-eng",
    "eng-jpg",
    "jpn-fra",
    "fra-jpg",
    "eng-fra",
    "fra-eng",
)

# Historic "-jpg" spellings are accepted and sent as "-jpn".
DIRECTION_ALIASES: Dict[str, str] = {
    "eng-jpg": "eng-jpn",
    "fra-jpg": "fra-jpn",
}

LANGUAGE_NAMES: Dict[str, str] = {
    "jpn": "Japanese",
    "eng": "English",
    "fra": "French",
}

JAPANESE_ENCODING = "cp932"
DEFAULT_ENCODING = "utf-8"


def describe_directions() -> str:
    return ", ".join(AVAILABLE_DIRECTIONS)


def normalise_direction(value: str) -> str:
    """Validate a direction token and return its canonical form."""

    token = (value or "").strip().lower()
    canonical = DIRECTION_ALIASES.get(token, token)
    if token not in AVAILABLE_DIRECTIONS and canonical not in DIRECTION_ALIASES.values():
        raise InvalidDirectionError(
            f"Unknown direction '{value}'. Available directions: {describe_directions()}"
        )
    return canonical


def split_direction(direction: str) -> Tuple[str, str]:
    source, _, target = direction.partition("-")
    return source, target


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


def source_encoding(direction: str) -> str:
    """Encoding used to decode the input file for a direction."""

    source, _ = split_direction(direction)
    return JAPANESE_ENCODING if source == "jpn" else DEFAULT_ENCODING


def destination_encoding(direction: str) -> str:
    """Encoding used to write the translated file for a direction."""

    _, target = split_direction(direction)
    return JAPANESE_ENCODING if target == "jpn" else DEFAULT_ENCODING
