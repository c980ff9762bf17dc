import pytest
import requests

from localizer import providers
from localizer.config import Settings
from localizer.providers import (
    Engine,
    GoogleTranslateProvider,
    LibreTranslateProvider,
    MyMemoryProvider,
    ProviderContext,
)


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._data


def test_google_batch_request(monkeypatch):
    calls = {}

    def fake_post(url, params=None, json=None, timeout=None):
        calls.update(url=url, params=params, json=json)
        return FakeResponse({"data": {"translations": [
            {"translatedText": "Bonjour"}, {"translatedText": ""},
        ]}})

    monkeypatch.setattr(providers.requests, "post", fake_post)
    gcp = GoogleTranslateProvider("KEY", endpoint="https://example.test/")
    assert gcp.translate_batch(["Hello", "World"], "fr") == ["Bonjour", None]
    assert calls["url"] == "https://example.test/language/translate/v2"
    assert calls["params"] == {"key": "KEY"}
    assert calls["json"] == {"q": ["Hello", "World"], "source": "en",
                             "target": "fr", "format": "text"}


def test_google_http_error_becomes_connection_error(monkeypatch):
    monkeypatch.setattr(providers.requests, "post",
                        lambda *a, **k: FakeResponse({}, status_code=403))
    with pytest.raises(ConnectionError):
        GoogleTranslateProvider("KEY").translate_batch(["Hello"], "fr")


def test_google_unexpected_payload(monkeypatch):
    monkeypatch.setattr(providers.requests, "post",
                        lambda *a, **k: FakeResponse({"error": "nope"}))
    with pytest.raises(ValueError):
        GoogleTranslateProvider("KEY").translate_batch(["Hello"], "fr")


def test_mymemory_status_check(monkeypatch):
    responses = iter([
        FakeResponse({"responseStatus": 200, "responseData": {"translatedText": "Hola"}}),
        FakeResponse({"responseStatus": 429, "responseData": {"translatedText": "LIMIT"}}),
    ])
    seen = []

    def fake_get(url, params=None, timeout=None):
        seen.append(params)
        return next(responses)

    monkeypatch.setattr(providers.requests, "get", fake_get)
    mm = MyMemoryProvider()
    assert mm.translate("Hello", "es") == "Hola"
    assert mm.translate("Hello", "es") is None
    assert seen[0] == {"q": "Hello", "langpair": "en|es"}


def test_libre_sends_api_key(monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json)
        return FakeResponse({"translatedText": "Hallo"})

    monkeypatch.setattr(providers.requests, "post", fake_post)
    libre = LibreTranslateProvider("https://libre.test", api_key="secret")
    assert libre.translate("Hello", "de") == "Hallo"
    assert sent["url"] == "https://libre.test/translate"
    assert sent["json"]["api_key"] == "secret"


class StubBatch:
    def __init__(self, results=None, error=None, configured=True):
        self.results = results
        self.error = error
        self.is_configured = configured
        self.calls = 0

    def translate_batch(self, texts, target):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.results)


class StubSingle:
    def __init__(self, prefix=None, error=None):
        self.prefix = prefix
        self.error = error
        self.calls = []

    def translate(self, text, target):
        self.calls.append(text)
        if self.error:
            raise self.error
        return f"{self.prefix}{text}" if self.prefix else None


def make_context(gcp, mymemory=None, libre=None):
    return ProviderContext(gcp, mymemory or StubSingle(), libre or StubSingle(),
                           success_threshold=0.8, delay_ms=0)


def test_context_uses_google_when_successful():
    gcp = StubBatch(["a", "b", "c", "d", "e"])
    ctx = make_context(gcp)
    assert ctx.translate_batch(list("ABCDE"), "fr") == ["a", "b", "c", "d", "e"]
    assert ctx.engine == Engine.GCP


def test_context_switches_engine_on_low_success_rate():
    gcp = StubBatch(["a", None, None, "d", "e"])
    mymemory = StubSingle(prefix="mm:")
    ctx = make_context(gcp, mymemory)
    assert ctx.translate_batch(list("vwxyz"), "fr") == ["mm:v", "mm:w", "mm:x", "mm:y", "mm:z"]
    assert ctx.engine == Engine.MYMEMORY
    # later batches skip Google entirely
    ctx.translate_batch(["z"], "fr")
    assert gcp.calls == 1


def test_context_falls_through_chain_and_returns_none():
    mymemory = StubSingle(error=ConnectionError("down"))
    libre = StubSingle(prefix="lt:")
    ctx = make_context(StubBatch(error=ConnectionError("boom")), mymemory, libre)
    assert ctx.translate_batch(["x"], "fr") == ["lt:x"]

    ctx = make_context(StubBatch(configured=False), StubSingle(), StubSingle())
    assert ctx.engine == Engine.MYMEMORY
    assert ctx.translate_batch(["x", "y"], "fr") == [None, None]


def test_context_empty_input():
    assert make_context(StubBatch([])).translate_batch([], "fr") == []


def test_context_from_settings():
    settings = Settings(gcp_api_key="", libre_url="https://libre.test/", source_language="en")
    ctx = ProviderContext.from_settings(settings)
    assert ctx.engine == Engine.MYMEMORY
    assert ctx.libre.base_url == "https://libre.test"
    assert ProviderContext.from_settings(Settings(gcp_api_key="k")).engine == Engine.GCP


@pytest.mark.parametrize("get_data, post_data", [
    (["not", "a", "dict"], "oops"),
    ({"responseStatus": 200, "responseData": "text"}, ["x"]),
    ("plain", {"data": ["translations"]}),
])
def test_non_object_payloads_become_none(monkeypatch, get_data, post_data):
    monkeypatch.setattr(providers.requests, "get", lambda *a, **k: FakeResponse(get_data))
    monkeypatch.setattr(providers.requests, "post", lambda *a, **k: FakeResponse(post_data))
    settings = Settings(gcp_api_key="KEY", delay_ms=0)
    ctx = ProviderContext.from_settings(settings)
    assert ctx.translate_batch(["Hello"], "fr") == [None]
    assert ctx.engine == Engine.MYMEMORY


def test_single_providers_reject_non_object_payloads(monkeypatch):
    monkeypatch.setattr(providers.requests, "get", lambda *a, **k: FakeResponse([1, 2]))
    monkeypatch.setattr(providers.requests, "post", lambda *a, **k: FakeResponse("oops"))
    with pytest.raises(ValueError):
        MyMemoryProvider().translate("Hello", "fr")
    with pytest.raises(ValueError):
        LibreTranslateProvider().translate("Hello", "fr")
