"""Tests for discovery configuration loading."""

from dataclasses import FrozenInstanceError

import pytest

from sitemaptree.config import ENV_VARS, DiscoveryConfig, load_discovery_config
from sitemaptree.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)


class TestDiscoveryConfig:
    """Tests for DiscoveryConfig dataclass."""

    def test_defaults(self) -> None:
        config = DiscoveryConfig(site_url="https://example.com/shop")
        assert config.timeout == 30.0
        assert config.max_depth == 10
        assert config.max_age_years == 2
        assert config.missing_robots == "fail"
        assert config.index_detection == "root"
        assert config.origin == "https://example.com"

    def test_config_is_frozen(self) -> None:
        config = DiscoveryConfig(site_url="https://example.com")
        with pytest.raises(FrozenInstanceError):
            config.timeout = 1.0  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("kwargs", "setting"),
        [
            ({"site_url": "example.com"}, "site_url"),
            ({"site_url": "ftp://example.com"}, "site_url"),
            ({"site_url": "https://example.com", "timeout": 0}, "timeout"),
            ({"site_url": "https://example.com", "max_depth": 0}, "max_depth"),
            ({"site_url": "https://example.com", "max_age_years": -1}, "max_age_years"),
            ({"site_url": "https://example.com", "missing_robots": "ignore"}, "missing_robots"),
            ({"site_url": "https://example.com", "index_detection": "guess"}, "index_detection"),
        ],
    )
    def test_validation(self, kwargs: dict, setting: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            DiscoveryConfig(**kwargs)
        assert exc_info.value.context["setting"] == setting
        assert exc_info.value.context["stage"] == "config"


class TestLoadDiscoveryConfig:
    """Tests for load_discovery_config."""

    def test_requires_site_url(self) -> None:
        with pytest.raises(ConfigurationError, match="No site URL"):
            load_discovery_config()

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SITEMAPTREE_SITE_URL", "https://example.com/")
        monkeypatch.setenv("SITEMAPTREE_TIMEOUT", "5")
        monkeypatch.setenv("SITEMAPTREE_MAX_DEPTH", "3")
        monkeypatch.setenv("SITEMAPTREE_MAX_AGE_YEARS", "1")
        monkeypatch.setenv("SITEMAPTREE_MISSING_ROBOTS", "ALLOW")
        monkeypatch.setenv("SITEMAPTREE_INDEX_DETECTION", "heuristic")

        config = load_discovery_config()

        assert config == DiscoveryConfig(
            site_url="https://example.com/",
            timeout=5.0,
            max_depth=3,
            max_age_years=1,
            missing_robots="allow",
            index_detection="heuristic",
        )

    def test_overrides_win_and_none_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SITEMAPTREE_SITE_URL", "https://env.example.com/")
        monkeypatch.setenv("SITEMAPTREE_MAX_DEPTH", "4")

        config = load_discovery_config(site_url="https://cli.example.com/", max_depth=None)

        assert config.site_url == "https://cli.example.com/"
        assert config.max_depth == 4

    def test_invalid_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SITEMAPTREE_SITE_URL", "https://example.com/")
        monkeypatch.setenv("SITEMAPTREE_TIMEOUT", "fast")

        with pytest.raises(ConfigurationError) as exc_info:
            load_discovery_config()
        assert exc_info.value.context["setting"] == "timeout"

    def test_unknown_override(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown configuration"):
            load_discovery_config(site_url="https://example.com", colour="blue")
