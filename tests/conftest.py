import sys, pathlib
import threading

import pytest

# Ensure project root on sys.path when running tests directly
ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings
from core.eventbus import EventBus
from core.ratelimit import RateLimiter


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self, start=100.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeHttpClient:
    """Fetch client serving canned bodies.

    ``responses`` maps a URL substring to a body, an exception, or a callable
    taking the URL. Unmatched URLs get ``default``.
    """

    def __init__(self, responses=None, default=""):
        self.responses = responses or {}
        self.default = default
        self.calls = []
        self._lock = threading.Lock()

    def request_web_page(self, url, body=None, headers=None, username="", password=""):
        with self._lock:
            self.calls.append({"url": url, "headers": headers, "thread": threading.current_thread()})
        for fragment, response in self.responses.items():
            if fragment in url:
                break
        else:
            response = self.default
        if callable(response):
            response = response(url)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def urls(self):
        return [c["url"] for c in self.calls]


class RecordingBus(EventBus):
    """Event bus that keeps every published event."""

    def __init__(self):
        super().__init__()
        self.events = []

    def publish(self, topic, priority, payload):
        self.events.append((topic, priority, payload))
        super().publish(topic, priority, payload)

    def payloads(self, topic):
        return [p for t, _, p in self.events if t == topic]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        domains=["example.com"],
        api_keys={"shodan": {"key": "secret"}},
    )


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def make_limiter(clock):
    def factory():
        return RateLimiter(clock=clock, sleep=clock.sleep)
    return factory




@pytest.fixture(autouse=True)
def no_env_api_keys(monkeypatch):
    monkeypatch.delenv("SHODAN_API_KEY", raising=False)
    monkeypatch.delenv("DOGPILE_API_KEY", raising=False)
