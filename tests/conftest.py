"""Shared fixtures for the sourcetrans test suite."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

import pytest

from sourcetrans.errors import TranslationProviderError
from sourcetrans.providers import TranslationProvider


class RecordingTranslator:
    """Translate function backed by a mapping that records every request."""

    def __init__(self, mapping: Optional[Dict[str, str]] = None) -> None:
        self.mapping = dict(mapping or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, text: str) -> Optional[str]:
        with self._lock:
            self.calls.append(text)
        return self.mapping.get(text)


class DictionaryProvider(TranslationProvider):
    """Provider answering from a fixed mapping."""

    name = "dictionary"

    def __init__(self, mapping: Dict[str, str], *, fail_on: Optional[str] = None) -> None:
        super().__init__()
        self.mapping = mapping
        self.fail_on = fail_on
        self.requests: List[dict] = []

    def translate(self, text, *, direction, use_corrector=True, max_chars=800):
        self.requests.append(
            {
                "text": text,
                "direction": direction,
                "use_corrector": use_corrector,
                "max_chars": max_chars,
            }
        )
        if self.fail_on is not None and text == self.fail_on:
            raise TranslationProviderError("Translation service unavailable: boom")
        return self.mapping.get(text)


@pytest.fixture
def make_translator():
    """Build a recording translate function from a mapping."""
    return RecordingTranslator


@pytest.fixture
def make_provider():
    """Build a mapping-backed translation provider."""
    return DictionaryProvider
