"""
Shared fixtures: a scripted translator backend and fake time.
"""

import pytest
from jsonlingo.backends.base import TranslatorBackend
from jsonlingo.config import Settings
from jsonlingo.core.errors import BackendError, DetectionError
from jsonlingo.core.models import LanguageInfo
from jsonlingo.services.cache import TranslationCache
from jsonlingo.services.orchestrator import TranslationOrchestrator
from jsonlingo.services.rate_limiter import RateLimiter


class FakeBackend(TranslatorBackend):
    """
    Backend with canned translations.

    `failures` maps a text to how many calls fail before it succeeds;
    -1 fails forever. Unknown texts translate to "[target] text".
    """

    backend_id = "fake"

    def __init__(self, translations=None, failures=None, detected="en", detect_fails=False):
        self.translations = translations or {}
        self.failures = dict(failures or {})
        self.detected = detected
        self.detect_fails = detect_fails
        self.calls: list[tuple[str, str, str]] = []
        self.detect_calls: list[str] = []
        self.closed = False

    async def translate(self, text, source, target):
        self.calls.append((text, source, target))
        remaining = self.failures.get(text, 0)
        if remaining:
            if remaining > 0:
                self.failures[text] = remaining - 1
            raise BackendError(f"Service unavailable for: {text}")
        return self.translations.get(text, f"[{target}] {text}")

    async def detect_language(self, text):
        self.detect_calls.append(text)
        if self.detect_fails:
            raise DetectionError("detector offline")
        return self.detected

    async def list_languages(self):
        return [LanguageInfo(code="en", name="English"), LanguageInfo(code="fr", name="French")]

    async def health_check(self):
        return True

    async def aclose(self):
        self.closed = True


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)


class FakeClock:
    """Manually advanced clock; also works as a sleep that advances it."""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self):
        return self.now

    def advance(self, amount):
        self.now += amount

    async def sleep(self, delay):
        self.sleeps.append(delay)
        self.now += delay


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, detection_fallback_language="en", request_timeout=5.0)


@pytest.fixture
def backend():
    return FakeBackend(translations={"Hello": "Bonjour", "World": "Monde"})


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def cache():
    return TranslationCache()


@pytest.fixture
def orchestrator(backend, cache, settings, fake_sleep):
    """Orchestrator with a fake backend, in-memory cache and no real waits."""
    return TranslationOrchestrator(
        backend,
        cache=cache,
        rate_limiter=RateLimiter(max_requests=1000, window_ms=60_000),
        settings=settings,
        sleep=fake_sleep,
    )


@pytest.fixture
def clock():
    return FakeClock()
