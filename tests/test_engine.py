import time

import pytest

from conftest import FakeHttpClient, RecordingBus
from config import Settings
from core.eventbus import LOG_TOPIC, NEW_NAME_TOPIC
from discover.engine import SubdomainDiscovery
from plugins.discovery import SourceKind
from plugins.discovery.dogpile_plugin import DogpilePlugin
from plugins.discovery.shodan_plugin import ShodanPlugin


@pytest.fixture(autouse=True)
def no_throttle(monkeypatch):
    monkeypatch.setattr(DogpilePlugin, "rate_interval", 0.0)
    monkeypatch.setattr(ShodanPlugin, "rate_interval", 0.0)


@pytest.fixture
def http():
    return FakeHttpClient({
        "dogpile.com": "www.example.com mail.example.com",
        "api.shodan.io": '{"subdomains": ["api", "www"]}',
    })


def test_all_sources_queried(settings, http):
    bus = RecordingBus()
    discovery = SubdomainDiscovery(settings, bus=bus, http_client=http)

    found = discovery.discover("example.com")

    assert {p.name for p in discovery.plugins} == {"Dogpile", "Shodan"}
    assert len(http.calls) == 7
    dogpile = [f.name for f in found if f.source == "Dogpile"]
    shodan = [f.name for f in found if f.source == "Shodan"]
    assert dogpile == ["www.example.com", "mail.example.com"] * 6
    assert shodan == ["api.example.com", "www.example.com"]
    assert all(f.tag is SourceKind.API for f in found if f.source == "Shodan")
    assert len(bus.payloads(LOG_TOPIC)) == 2


def test_domain_added_to_scope(http):
    settings = Settings()
    discovery = SubdomainDiscovery(settings, http_client=http, plugin_names=["dogpile"])

    found = discovery.discover("Example.com")

    assert settings.domains == ["example.com"]
    assert len(found) == 12


def test_source_without_key_does_not_affect_others(http):
    settings = Settings(domains=["example.com"])
    discovery = SubdomainDiscovery(settings, http_client=http)

    found = discovery.discover("example.com")

    assert {f.source for f in found} == {"Dogpile"}
    assert not any("shodan" in url for url in http.urls)


def test_failing_source_does_not_affect_others(settings):
    def refuse(url):
        from core.http import FetchError
        raise FetchError(url, "blocked")

    http = FakeHttpClient({
        "dogpile.com": refuse,
        "api.shodan.io": '{"subdomains": ["api"]}',
    })
    bus = RecordingBus()
    discovery = SubdomainDiscovery(settings, bus=bus, http_client=http)

    found = discovery.discover("example.com")

    assert [f.name for f in found] == ["api.example.com"]
    assert any(msg.endswith(": blocked") for msg in bus.payloads(LOG_TOPIC))


def test_timeout_cancels_remaining_pages(settings):
    def slow(url):
        time.sleep(0.3)
        return "www.example.com"

    http = FakeHttpClient({"dogpile.com": slow})
    discovery = SubdomainDiscovery(settings, http_client=http, plugin_names=["dogpile"])

    found = discovery.discover("example.com", timeout=0.1)

    assert len(http.calls) == 1
    assert [f.name for f in found] == ["www.example.com"]


def test_stop_cancels_every_source(settings, http):
    discovery = SubdomainDiscovery(settings, http_client=http)
    discovery.stop()

    assert discovery.discover("example.com") == []
    assert http.calls == []


def test_unknown_source_name_skipped(settings, http):
    discovery = SubdomainDiscovery(settings, http_client=http, plugin_names=["nope", "shodan"])
    assert [p.name for p in discovery.plugins] == ["Shodan"]


def test_names_from_other_requests_not_collected(settings, http):
    bus = RecordingBus()
    discovery = SubdomainDiscovery(settings, bus=bus, http_client=http, plugin_names=["shodan"])

    discovery.discover("example.com")
    found = discovery.discover("other.org")

    assert [f.name for f in found] == ["api.other.org", "www.other.org"]
    assert len(bus.payloads(NEW_NAME_TOPIC)) == 4


def test_env_key_reaches_source_outside_enabled_list(tmp_path, monkeypatch, http):
    from config import get_settings

    path = tmp_path / "subsweep.yaml"
    path.write_text("domains: [example.com]\ndiscovery:\n  enabled_plugins: [dogpile]\n")
    monkeypatch.setenv("SHODAN_API_KEY", "from-env")
    get_settings.cache_clear()
    try:
        settings = get_settings(str(path))
        discovery = SubdomainDiscovery(settings, http_client=http, plugin_names=["shodan"])
        found = discovery.discover("example.com")
    finally:
        get_settings.cache_clear()

    assert [f.name for f in found] == ["api.example.com", "www.example.com"]
    assert "key=from-env" in http.urls[0]


def test_worker_pool_reused_across_requests(settings, http):
    discovery = SubdomainDiscovery(settings, http_client=http)

    for _ in range(3):
        discovery.discover("example.com")

    threads = {call["thread"] for call in http.calls}
    assert len(threads) <= 2
    assert len(http.calls) == 21
    discovery.close()
    assert all(p.quit.is_set() for p in discovery.plugins)
