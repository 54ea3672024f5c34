import pytest

from config import Credential, Settings, get_settings, load_config_file
from core.domains import DomainPattern


def test_defaults():
    settings = Settings()
    assert settings.domains == []
    assert settings.discovery.enabled_plugins == ["dogpile", "shodan"]
    assert settings.api_keys == {}


def test_domains_are_normalized_and_unique():
    settings = Settings(domains=["Example.COM.", "example.com", " test.org ", ""])
    assert settings.domains == ["example.com", "test.org"]


def test_domain_pattern_only_for_scoped_domains():
    settings = Settings(domains=["example.com"])
    pattern = settings.domain_pattern("EXAMPLE.com")
    assert isinstance(pattern, DomainPattern)
    assert settings.domain_pattern("example.com") is pattern
    assert settings.domain_pattern("other.org") is None
    assert settings.domain_pattern("") is None


def test_add_domain():
    settings = Settings()
    settings.add_domain("New.Example.")
    settings.add_domain("new.example")
    assert settings.domains == ["new.example"]
    assert settings.domain_pattern("new.example") is not None


def test_api_key_lookup_is_case_insensitive():
    settings = Settings(api_keys={"Shodan": {"key": "abc"}, "empty": {"key": ""}})
    assert settings.api_key("SHODAN") == Credential(key="abc")
    assert settings.api_key("empty") is None
    assert settings.api_key("missing") is None


def test_credential_truthiness():
    assert Credential(key="x")
    assert not Credential()


def test_api_keys_from_env(monkeypatch):
    monkeypatch.setenv("SHODAN_API_KEY", "from-env")
    monkeypatch.delenv("DOGPILE_API_KEY", raising=False)
    settings = Settings()
    settings.load_api_keys_from_env()
    assert settings.api_key("shodan").key == "from-env"
    assert settings.api_key("dogpile") is None


def test_load_config_file(tmp_path):
    path = tmp_path / "subsweep.yaml"
    path.write_text(
        "domains:\n"
        "  - example.com\n"
        "discovery:\n"
        "  request_timeout: 30\n"
        "  enabled_plugins: [shodan]\n"
        "api_keys:\n"
        "  shodan:\n"
        "    key: from-file\n"
    )
    settings = Settings.model_validate(load_config_file(path))
    assert settings.domains == ["example.com"]
    assert settings.discovery.request_timeout == 30
    assert settings.discovery.enabled_plugins == ["shodan"]
    assert settings.api_key("shodan").key == "from-file"


def test_unreadable_config_file_gives_empty_config(tmp_path, capsys):
    path = tmp_path / "broken.yaml"
    path.write_text("domains: [unclosed\n")
    assert load_config_file(path) == {}
    assert "Failed to load config file" in capsys.readouterr().out


def test_missing_config_file(tmp_path):
    assert load_config_file(tmp_path / "nope.yaml") == {}


def test_get_settings_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "subsweep.yaml"
    path.write_text("api_keys:\n  shodan:\n    key: from-file\n")
    monkeypatch.setenv("SHODAN_API_KEY", "from-env")
    get_settings.cache_clear()
    try:
        settings = get_settings(str(path))
        assert settings.api_key("shodan").key == "from-env"
    finally:
        get_settings.cache_clear()


def test_env_key_for_source_not_enabled(monkeypatch):
    monkeypatch.setenv("SHODAN_API_KEY", "from-env")
    settings = Settings(discovery={"enabled_plugins": ["dogpile"]})
    settings.load_api_keys_from_env()
    assert "shodan" not in settings.api_keys
    assert settings.api_key("Shodan") == Credential(key="from-env")


def test_configured_key_wins_over_env(monkeypatch):
    monkeypatch.setenv("SHODAN_API_KEY", "from-env")
    settings = Settings(api_keys={"shodan": {"key": "from-config"}})
    assert settings.api_key("shodan").key == "from-config"
