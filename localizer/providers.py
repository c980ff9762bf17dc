"""Third-party translation API clients and the engine-selection context."""

import logging
import threading
import time
from enum import Enum
from typing import Optional

import requests

from .config import Settings

log = logging.getLogger(__name__)


class Engine(str, Enum):
    GCP = "gcp"
    MYMEMORY = "mymemory"
    LIBRE = "libre"


# Per-text fallback chain once the batch engine is abandoned
FALLBACK_CHAIN = (Engine.MYMEMORY, Engine.LIBRE)


class GoogleTranslateProvider:
    """Google Cloud Translation v2 (batch capable)."""

    def __init__(self, api_key: str, endpoint: str = "https://translation.googleapis.com",
                 source: str = "en", timeout: int = 30):
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.source = source
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def translate_batch(self, texts: list, target: str) -> list:
        """Translate many texts in one request.

        Raises:
            ConnectionError: transport or HTTP failure.
            ValueError: the response has no usable translations list.
        """
        if not self.api_key:
            raise ConnectionError("Google Cloud Translation API key not configured")
        payload = {"q": texts, "source": self.source, "target": target, "format": "text"}
        try:
            r = requests.post(
                f"{self.endpoint}/language/translate/v2",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise ConnectionError(f"Google Translate API error: {e}") from e

        body = data.get("data") if isinstance(data, dict) else None
        translations = body.get("translations") if isinstance(body, dict) else None
        if not isinstance(translations, list):
            raise ValueError(f"Unexpected Google Translate response: {str(data)[:200]}")
        results = [item.get("translatedText") or None if isinstance(item, dict) else None
                   for item in translations]
        # Pad/truncate so the result lines up with the input
        return (results + [None] * len(texts))[:len(texts)]


class MyMemoryProvider:
    """MyMemory free translation API (one text per request)."""

    def __init__(self, base_url: str = "https://api.mymemory.translated.net",
                 source: str = "en", timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.timeout = timeout

    def translate(self, text: str, target: str) -> Optional[str]:
        try:
            r = requests.get(
                f"{self.base_url}/get",
                params={"q": text, "langpair": f"{self.source}|{target}"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise ConnectionError(f"MyMemory API error: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected MyMemory response: {str(data)[:200]}")
        if data.get("responseStatus") != 200:
            log.debug("MyMemory status %s for %r", data.get("responseStatus"), text[:30])
            return None
        response = data.get("responseData")
        if not isinstance(response, dict):
            raise ValueError(f"Unexpected MyMemory responseData: {str(response)[:200]}")
        return response.get("translatedText") or None


class LibreTranslateProvider:
    """LibreTranslate instance (one text per request)."""

    def __init__(self, base_url: str = "https://libretranslate.com", api_key: str = "",
                 source: str = "en", timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.source = source
        self.timeout = timeout

    def translate(self, text: str, target: str) -> Optional[str]:
        payload = {"q": text, "source": self.source, "target": target, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        try:
            r = requests.post(f"{self.base_url}/translate", json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise ConnectionError(f"LibreTranslate API error: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected LibreTranslate response: {str(data)[:200]}")
        return data.get("translatedText") or None


class ProviderContext:
    """Chooses a provider per batch and remembers fallbacks for the run.

    Starts on Google when an API key is configured.  If a Google batch
    comes back with too many failures the context switches ``engine`` to
    the per-text fallback chain for every later batch.  Failures never
    raise: they show up as ``None`` entries.
    """

    def __init__(self, gcp: GoogleTranslateProvider, mymemory: MyMemoryProvider,
                 libre: LibreTranslateProvider, success_threshold: float = 0.8,
                 delay_ms: int = 30):
        self.gcp = gcp
        self.mymemory = mymemory
        self.libre = libre
        self.success_threshold = success_threshold
        self.delay_ms = delay_ms
        self.engine = Engine.GCP if gcp.is_configured else Engine.MYMEMORY
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderContext":
        src, timeout = settings.source_language, settings.timeout
        return cls(
            gcp=GoogleTranslateProvider(settings.gcp_api_key, settings.gcp_endpoint,
                                        source=src, timeout=timeout),
            mymemory=MyMemoryProvider(settings.mymemory_url, source=src, timeout=timeout),
            libre=LibreTranslateProvider(settings.libre_url, settings.libre_api_key,
                                         source=src, timeout=timeout),
            success_threshold=settings.success_threshold,
            delay_ms=settings.delay_ms,
        )

    def translate_batch(self, texts: list, target: str) -> list:
        """Return a list the same length as ``texts`` with strings or None."""
        if not texts:
            return []

        if self.engine == Engine.GCP:
            log.info("Translating %d item(s) with Google Cloud Translation", len(texts))
            try:
                results = self.gcp.translate_batch(texts, target)
            except (ConnectionError, ValueError) as e:
                log.warning("Google batch failed: %s", e)
                results = [None] * len(texts)
            success = sum(1 for r in results if r is not None) / len(texts)
            log.info("Google success rate: %.1f%%", success * 100)
            if success > self.success_threshold:
                return results
            with self._lock:
                if self.engine == Engine.GCP:
                    log.warning("Google success rate too low — switching to fallback engines")
                    self.engine = Engine.MYMEMORY

        log.info("Translating %d item(s) with fallback engines", len(texts))
        results = []
        for i, text in enumerate(texts):
            results.append(self._translate_single(text, target))
            if i < len(texts) - 1 and self.delay_ms:
                time.sleep(self.delay_ms * 2 / 1000)
        return results

    def _translate_single(self, text: str, target: str) -> Optional[str]:
        for engine in FALLBACK_CHAIN:
            provider = self.mymemory if engine == Engine.MYMEMORY else self.libre
            try:
                translation = provider.translate(text, target)
            except (ConnectionError, ValueError) as e:
                log.debug("%s failed for %r: %s", engine.value, text[:30], e)
                continue
            if translation:
                return translation
        return None
