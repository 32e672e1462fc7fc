"""
LibreTranslate HTTP backend.

Talks to a LibreTranslate server (self-hosted or public) over its JSON API:
POST /translate, POST /detect, GET /languages.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from jsonlingo.backends.base import TranslatorBackend
from jsonlingo.backends.languages import FALLBACK_LANGUAGES
from jsonlingo.core.errors import BackendError, DetectionError
from jsonlingo.core.models import LanguageInfo

logger = logging.getLogger(__name__)


class LibreTranslateBackend(TranslatorBackend):
    """
    Backend for a LibreTranslate server.
    
    Handles:
    - Translation of single strings (plain text format)
    - Source language detection
    - Language listing, with a built-in fallback list
    - Health checks
    """
    
    backend_id = "libretranslate"
    
    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        api_key: str | None = None,
        timeout: float = 30.0,
        health_check_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or None
        self.timeout = timeout
        self.health_check_timeout = health_check_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client
    
    def _with_key(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.api_key:
            payload["api_key"] = self.api_key
        return payload
    
    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            return response.json().get("error") or response.text
        except ValueError:
            return response.text
    
    async def translate(self, text: str, source: str, target: str) -> str:
        payload = self._with_key({
            "q": text,
            "source": source,
            "target": target,
            "format": "text",
        })
        try:
            response = await self.client.post("/translate", json=payload)
        except httpx.HTTPError as e:
            raise BackendError(f"Translation failed: {e}") from e
        
        if response.status_code != 200:
            detail = self._error_detail(response)
            raise BackendError(f"Translation failed ({response.status_code}): {detail}")
        
        try:
            translated = response.json()["translatedText"]
        except (ValueError, KeyError, TypeError) as e:
            raise BackendError(f"Malformed translation response: {response.text[:200]}") from e
        
        # Batched requests return a list
        if isinstance(translated, list):
            translated = translated[0] if translated else ""
        if not isinstance(translated, str):
            raise BackendError(f"Malformed translation response: {response.text[:200]}")
        return translated
    
    async def detect_language(self, text: str) -> str:
        try:
            response = await self.client.post("/detect", json=self._with_key({"q": text}))
            response.raise_for_status()
            detections = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DetectionError(f"Language detection failed: {e}") from e
        
        if not detections or not isinstance(detections, list):
            raise DetectionError("Language detection returned no candidates")
        if not isinstance(detections[0], dict):
            raise DetectionError("Language detection returned a malformed candidate")
        language = detections[0].get("language")
        if not isinstance(language, str) or not language:
            raise DetectionError("Language detection returned no language code")
        return language
    
    async def list_languages(self) -> list[LanguageInfo]:
        try:
            response = await self.client.get("/languages")
            response.raise_for_status()
            return [
                LanguageInfo(code=item["code"], name=item["name"])
                for item in response.json()
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to fetch languages, using fallback list: {e}")
            return list(FALLBACK_LANGUAGES)
    
    async def health_check(self) -> bool:
        try:
            response = await self.client.get(
                "/languages", timeout=self.health_check_timeout
            )
        except httpx.HTTPError:
            return False
        return response.status_code == 200
    
    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
