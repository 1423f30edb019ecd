"""Translation provider abstractions."""

from __future__ import annotations

import json
import sys
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

import requests

from .directions import language_name, split_direction
from .errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)

if TYPE_CHECKING:  # pragma: no cover
    from .configuration import SourceTransConfig

DEFAULT_REVERSO_ENDPOINT = (
    "https://async5.reverso.net/WebReferences/WSAJAXInterface.asmx/TranslateCorrWS"
)

PROVIDER_SYNONYMS = {
    "default": "reverso",
    "reverso_net": "reverso",
    "gpt": "openai",
    "azure": "azure_openai",
    "azure_open_ai": "azure_openai",
    "azureopenai": "azure_openai",
    "mock": "echo",
    "noop": "echo",
}


def normalise_provider_name(name: str) -> str:
    """Map a provider name or alias to its canonical name."""

    normalized = name.strip().lower().replace("-", "_")
    return PROVIDER_SYNONYMS.get(normalized, normalized)


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "provider"

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    @abstractmethod
    def translate(
        self,
        text: str,
        *,
        direction: str,
        use_corrector: bool = True,
        max_chars: int = 800,
    ) -> str | None:
        """Translate one comment; ``None`` means no translation was found."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        if isinstance(payload, (dict, list)):
            message = json.dumps(payload, ensure_ascii=False, indent=2)
        else:
            message = str(payload)
        print(f"[sourcetrans][provider-debug] {label}:\n{message}", file=sys.stderr)


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for dry runs)."""

    name = "echo"

    def translate(
        self,
        text: str,
        *,
        direction: str,
        use_corrector: bool = True,
        max_chars: int = 800,
    ) -> str | None:
        return text


class ReversoTranslationProvider(TranslationProvider):
    """Translation provider for the Reverso correction web service."""

    name = "reverso"
    DIRECTION_SUFFIX = "-5"
    RESULT_BEGIN = '"result":"'
    RESULT_END = '","'
    HEADERS = {
        "Accept": "application/json",
        "Content-Type": "application/json; charset=utf-8",
    }

    def __init__(
        self,
        *,
        endpoint: str = DEFAULT_REVERSO_ENDPOINT,
        timeout: float | None = 60.0,
        session: requests.Session | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The injected session, otherwise one session per calling thread."""

        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    @classmethod
    def build_payload(
        cls,
        text: str,
        direction: str,
        use_corrector: bool = True,
        max_chars: int = 800,
    ) -> Dict[str, str]:
        return {
            "searchText": text,
            "direction": f"{direction}{cls.DIRECTION_SUFFIX}",
            "maxTranslationChars": str(max_chars),
            "usecorr": "true" if use_corrector else "false",
        }

    @classmethod
    def extract_result(cls, body: str) -> str | None:
        """Cut the result field out of a raw response body.

        The body is searched as text; if either marker is missing there is
        no result.
        """

        begin = body.find(cls.RESULT_BEGIN)
        if begin < 0:
            return None
        begin += len(cls.RESULT_BEGIN)
        end = body.find(cls.RESULT_END, begin)
        if end < 0:
            return None
        raw = body[begin:end]
        try:
            return json.loads(f'"{raw}"')
        except json.JSONDecodeError:
            return raw

    def translate(
        self,
        text: str,
        *,
        direction: str,
        use_corrector: bool = True,
        max_chars: int = 800,
    ) -> str | None:
        payload = self.build_payload(text, direction, use_corrector, max_chars)
        self._log_debug("provider.request.payload", payload)
        try:
            response = self.session.post(
                self.endpoint,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                headers=self.HEADERS,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise TranslationProviderError(
                f"Translation service unavailable: {exc}"
            ) from exc

        response.encoding = response.encoding or "utf-8"
        body = response.text
        self._log_debug("provider.response.raw", body)
        result = self.extract_result(body)
        self._log_debug("provider.response.result", result)
        return result


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses OpenAI chat models."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"
    SYSTEM_PROMPT = (
        "You are a professional translator of source code comments. "
        "Translate the comment you are given into the requested language. "
        "Keep identifiers, code, numbers and markup unchanged. "
        "Respond with the translated comment only, without quotes or commentary."
    )

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        azure_endpoint: str | None = None,
        azure_api_version: str | None = None,
        azure_deployment: str | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        if azure_endpoint:
            self._client = self._build_azure_client(api_key, azure_endpoint, azure_api_version)
            self.model = model or azure_deployment or self.DEFAULT_MODEL
        else:
            self._client = self._build_openai_client(api_key)
            self.model = model or self.DEFAULT_MODEL

    def _build_openai_client(self, api_key: str | None) -> Any:
        if not api_key:
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        from openai import OpenAI

        return OpenAI(api_key=api_key)

    def _build_azure_client(
        self,
        api_key: str | None,
        endpoint: str,
        api_version: str | None,
    ) -> Any:
        missing = [
            name
            for name, value in {
                "AZURE_OPENAI_API_KEY": api_key,
                "AZURE_OPENAI_API_VERSION": api_version,
            }.items()
            if not value
        ]
        if missing:
            raise TranslationProviderConfigurationError(
                "Azure OpenAI configuration incomplete. Please set: "
                + ", ".join(missing)
                + "."
            )
        from openai import AzureOpenAI

        return AzureOpenAI(
            api_key=api_key,
            api_version=api_version,
            azure_endpoint=endpoint,
        )

    def translate(
        self,
        text: str,
        *,
        direction: str,
        use_corrector: bool = True,
        max_chars: int = 800,
    ) -> str | None:
        source, target = split_direction(direction)
        user_payload = {
            "source_language": language_name(source),
            "target_language": language_name(target),
            "comment": text[:max_chars],
        }
        self._log_debug("provider.request.payload", user_payload)
        try:
            response = self._client.responses.create(
                model=self.model,
                input=[
                    {
                        "role": "system",
                        "content": [{"type": "input_text", "text": self.SYSTEM_PROMPT}],
                    },
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "input_text",
                                "text": json.dumps(user_payload, ensure_ascii=False),
                            }
                        ],
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc

        output_text = getattr(response, "output_text", None)
        self._log_debug("provider.response.output_text", output_text)
        if not output_text:
            return None
        return str(output_text).strip()


def build_provider(
    name: str | None,
    *,
    settings: "SourceTransConfig | None" = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by name, using settings where needed."""

    default_name = settings.SOURCETRANS_PROVIDER if settings is not None else "reverso"
    normalized = normalise_provider_name(name or default_name)
    if normalized == "reverso":
        if settings is None:
            return ReversoTranslationProvider(debug=debug)
        return ReversoTranslationProvider(
            endpoint=settings.REVERSO_ENDPOINT,
            timeout=settings.REVERSO_TIMEOUT,
            debug=debug,
        )
    if normalized == "openai":
        return OpenAITranslationProvider(
            api_key=settings.OPENAI_API_KEY if settings is not None else None,
            model=settings.OPENAI_MODEL if settings is not None else None,
            debug=debug,
        )
    if normalized == "azure_openai":
        if settings is None or not settings.AZURE_OPENAI_ENDPOINT:
            raise TranslationProviderConfigurationError(
                "Azure OpenAI configuration incomplete. Please set: AZURE_OPENAI_ENDPOINT."
            )
        return OpenAITranslationProvider(
            api_key=settings.AZURE_OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
            azure_api_version=settings.AZURE_OPENAI_API_VERSION,
            azure_deployment=settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            debug=debug,
        )
    if normalized == "echo":
        return EchoTranslationProvider(debug=debug)
    raise TranslationProviderConfigurationError(
        f"Unknown translation provider '{name}'."
    )
