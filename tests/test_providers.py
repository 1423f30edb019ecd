"""Unit tests for translation providers."""

import json
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from sourcetrans.errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)
from sourcetrans.providers import (
    DEFAULT_REVERSO_ENDPOINT,
    EchoTranslationProvider,
    OpenAITranslationProvider,
    ReversoTranslationProvider,
    build_provider,
    normalise_provider_name,
)


def fake_session(body="", status_error=None, post_error=None):
    response = MagicMock()
    response.text = body
    response.encoding = "utf-8"
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session = MagicMock()
    if post_error is not None:
        session.post.side_effect = post_error
    else:
        session.post.return_value = response
    return session


class TestReversoPayload:
    """Tests for the request body sent to Reverso."""

    def test_payload_fields(self):
        """The direction carries the service suffix and numbers are strings."""
        payload = ReversoTranslationProvider.build_payload("Hello", "eng-fra", True, 800)
        assert payload == {
            "searchText": "Hello",
            "direction": "eng-fra-5",
            "maxTranslationChars": "800",
            "usecorr": "true",
        }

    def test_corrector_disabled(self):
        """The corrector flag is sent as a lowercase string."""
        payload = ReversoTranslationProvider.build_payload("Hi", "fra-eng", False, 120)
        assert payload["usecorr"] == "false"
        assert payload["maxTranslationChars"] == "120"


class TestReversoResultExtraction:
    """Tests for reading the result field out of a response body."""

    def test_result_between_markers(self):
        """The text between the result marker and the next '","' is returned."""
        body = '{"d":{"result":"Bonjour le monde","corrText":"Hello world"}}'
        assert ReversoTranslationProvider.extract_result(body) == "Bonjour le monde"

    def test_missing_begin_marker(self):
        """Without the result marker there is no translation."""
        assert ReversoTranslationProvider.extract_result('{"error":"x","y":"z"}') is None

    def test_missing_end_marker(self):
        """Without a terminating marker there is no translation."""
        assert ReversoTranslationProvider.extract_result('{"result":"Bonjour"}') is None

    def test_end_marker_before_result_is_ignored(self):
        """The end marker is searched after the result marker."""
        body = '{"a":"b","result":"Salut","c":""}'
        assert ReversoTranslationProvider.extract_result(body) == "Salut"

    def test_json_escapes_are_decoded(self):
        """Escaped characters in the result are decoded."""
        body = '{"result":"caf\\u00e9 \\"noir\\"","x":""}'
        assert ReversoTranslationProvider.extract_result(body) == 'café "noir"'


class TestReversoTranslate:
    """Tests for the HTTP round trip."""

    def test_posts_json_and_returns_result(self):
        """One POST per call with JSON headers and payload."""
        session = fake_session('{"result":"Bonjour","corr":""}')
        provider = ReversoTranslationProvider(session=session, timeout=5)

        result = provider.translate("Hello", direction="eng-fra")

        assert result == "Bonjour"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == (DEFAULT_REVERSO_ENDPOINT,)
        assert kwargs["headers"]["Content-Type"] == "application/json; charset=utf-8"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert kwargs["timeout"] == 5
        assert json.loads(kwargs["data"].decode("utf-8")) == {
            "searchText": "Hello",
            "direction": "eng-fra-5",
            "maxTranslationChars": "800",
            "usecorr": "true",
        }

    def test_unicode_text_is_sent_as_utf8(self):
        """Non-ASCII comments survive the request encoding."""
        session = fake_session('{"result":"Hello","x":""}')
        provider = ReversoTranslationProvider(session=session)

        provider.translate("こんにちは", direction="jpn-eng")

        data = session.post.call_args.kwargs["data"]
        assert "こんにちは".encode("utf-8") in data

    def test_connection_error_raises(self):
        """Transport failures become provider errors."""
        session = fake_session(post_error=requests.exceptions.ConnectionError("down"))
        provider = ReversoTranslationProvider(session=session)
        with pytest.raises(TranslationProviderError):
            provider.translate("Hello", direction="eng-fra")

    def test_http_error_raises(self):
        """Non-success statuses become provider errors."""
        session = fake_session(status_error=requests.exceptions.HTTPError("500"))
        provider = ReversoTranslationProvider(session=session)
        with pytest.raises(TranslationProviderError):
            provider.translate("Hello", direction="eng-fra")

    def test_missing_result_returns_none(self):
        """A response without markers yields no translation."""
        session = fake_session("<html>maintenance</html>")
        provider = ReversoTranslationProvider(session=session)
        assert provider.translate("Hello", direction="eng-fra") is None

    def test_debug_output_goes_to_stderr(self, capsys):
        """Debug mode prints requests and responses to stderr."""
        session = fake_session('{"result":"Bonjour","x":""}')
        provider = ReversoTranslationProvider(session=session, debug=True)

        provider.translate("Hello", direction="eng-fra")

        captured = capsys.readouterr()
        assert "[sourcetrans][provider-debug] provider.request.payload" in captured.err
        assert "Bonjour" in captured.err
        assert captured.out == ""


class TestReversoSessions:
    """Tests for HTTP session reuse across threads."""

    def test_injected_session_is_shared(self):
        """An injected session is used from every thread."""
        session = fake_session()
        provider = ReversoTranslationProvider(session=session)
        seen = []

        worker = threading.Thread(target=lambda: seen.append(provider.session))
        worker.start()
        worker.join()

        assert seen == [session]
        assert provider.session is session

    def test_each_thread_gets_its_own_session(self):
        """Without an injected session every thread builds and keeps its own."""
        provider = ReversoTranslationProvider()
        seen = []

        def record():
            seen.append(provider.session)
            seen.append(provider.session)

        workers = [threading.Thread(target=record) for _ in range(2)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        assert isinstance(seen[0], requests.Session)
        assert seen[0] is seen[1]
        assert seen[2] is seen[3]
        assert seen[0] is not seen[2]
        assert provider.session is provider.session
        assert provider.session not in seen


class TestProviderFactory:
    """Tests for build_provider()."""

    def test_default_is_reverso(self):
        """Without a name or settings the Reverso provider is built."""
        assert isinstance(build_provider(None), ReversoTranslationProvider)

    @pytest.mark.parametrize("name", ["echo", "noop", "Mock"])
    def test_echo_synonyms(self, name):
        """Echo provider aliases."""
        assert isinstance(build_provider(name), EchoTranslationProvider)

    @pytest.mark.parametrize("name", ["reverso-net", "Reverso_Net", "default"])
    def test_reverso_synonyms(self, name):
        """Reverso aliases match the names accepted in configuration."""
        assert isinstance(build_provider(name), ReversoTranslationProvider)

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("reverso-net", "reverso"),
            ("AzureOpenAI", "azure_openai"),
            ("azure-open-ai", "azure_openai"),
            ("gpt", "openai"),
            ("mock", "echo"),
            ("babelfish", "babelfish"),
        ],
    )
    def test_normalise_provider_name(self, name, expected):
        """Names are lower-cased, dashes become underscores and aliases resolve."""
        assert normalise_provider_name(name) == expected

    def test_azure_synonym_uses_azure_settings(self, monkeypatch):
        """The azureopenai alias builds an Azure client from the settings."""
        built = {}
        monkeypatch.setattr(
            OpenAITranslationProvider,
            "_build_azure_client",
            lambda self, api_key, endpoint, api_version: built.update(
                endpoint=endpoint, api_version=api_version
            ),
        )
        settings = SimpleNamespace(
            SOURCETRANS_PROVIDER="reverso",
            AZURE_OPENAI_API_KEY="key",
            AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com",
            AZURE_OPENAI_API_VERSION="2024-10-21",
            AZURE_OPENAI_DEPLOYMENT_NAME="comments",
            OPENAI_MODEL=None,
        )

        provider = build_provider("azureopenai", settings=settings)

        assert isinstance(provider, OpenAITranslationProvider)
        assert built == {
            "endpoint": "https://example.openai.azure.com",
            "api_version": "2024-10-21",
        }
        assert provider.model == "comments"

    def test_echo_returns_input(self):
        """The echo provider hands back the text."""
        provider = EchoTranslationProvider()
        assert provider.translate("Hello", direction="eng-fra") == "Hello"

    def test_unknown_provider(self):
        """Unknown names are configuration errors."""
        with pytest.raises(TranslationProviderConfigurationError):
            build_provider("babelfish")

    def test_openai_requires_api_key(self):
        """OpenAI cannot be built without a key."""
        with pytest.raises(TranslationProviderConfigurationError):
            build_provider("openai")

    def test_azure_requires_endpoint(self):
        """Azure OpenAI needs settings with an endpoint."""
        with pytest.raises(TranslationProviderConfigurationError):
            build_provider("azure_openai")


class TestOpenAIProvider:
    """Tests for the OpenAI provider with a stubbed client."""

    @pytest.fixture
    def client(self, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(
            OpenAITranslationProvider,
            "_build_openai_client",
            lambda self, api_key: client,
        )
        return client

    def test_translates_single_comment(self, client):
        """The direction becomes language names and the output is stripped."""
        client.responses.create.return_value = SimpleNamespace(output_text=" Hello world \n")
        provider = OpenAITranslationProvider(api_key="sk-test")

        assert provider.translate("こんにちは世界", direction="jpn-eng") == "Hello world"

        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["model"] == OpenAITranslationProvider.DEFAULT_MODEL
        payload = json.loads(kwargs["input"][1]["content"][0]["text"])
        assert payload == {
            "source_language": "Japanese",
            "target_language": "English",
            "comment": "こんにちは世界",
        }

    def test_comment_is_cut_to_max_chars(self, client):
        """Long comments are truncated to the request limit."""
        client.responses.create.return_value = SimpleNamespace(output_text="ok")
        provider = OpenAITranslationProvider(api_key="sk-test", model="custom")

        provider.translate("abcdef", direction="eng-fra", max_chars=3)

        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["model"] == "custom"
        assert json.loads(kwargs["input"][1]["content"][0]["text"])["comment"] == "abc"

    def test_empty_output_is_no_translation(self, client):
        """An empty response means no translation."""
        client.responses.create.return_value = SimpleNamespace(output_text="")
        provider = OpenAITranslationProvider(api_key="sk-test")
        assert provider.translate("Hello", direction="eng-fra") is None
