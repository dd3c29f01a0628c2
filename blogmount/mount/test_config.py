import pytest

from blogmount.mount import config as config_module
from blogmount.mount.config import MountConfig, normalize_prefix
from blogmount.mount.errors import ConfigurationError


class TestNormalizePrefix:
    @pytest.mark.parametrize(
        "raw, expected",
        [("/blog", "/blog"), ("/blog/", "/blog"), ("blog", "/blog"), (" /blog// ", "/blog")],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_prefix(raw) == expected


class TestMountConfig:
    def test_trailing_slashes_removed(self):
        config = MountConfig(
            mount_prefix="/blog/",
            origin_base_url="https://blog.example.com/",
            site_base_url="https://example.com/",
        )
        assert config.mount_prefix == "/blog"
        assert config.origin_base_url == "https://blog.example.com"
        assert config.mounted_base_url == "https://example.com/blog"

    def test_origin_host_defaults_to_netloc(self):
        config = MountConfig(origin_base_url="https://blog.example.com:8443")
        assert config.origin_host == "blog.example.com:8443"

    def test_origin_host_override(self):
        config = MountConfig(origin_host="wordpress.internal")
        assert config.origin_host == "wordpress.internal"

    def test_route_prefixes_include_mount_and_sort_longest_first(self):
        config = MountConfig(route_prefixes=("/apps/blog/", "/api/apps/blog"))
        assert config.route_prefixes == ("/api/apps/blog", "/apps/blog", "/blog")

    def test_frozen(self, mount_config):
        with pytest.raises(Exception):
            mount_config.mount_prefix = "/other"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mount_prefix": "/"},
            {"origin_base_url": "blog.example.com"},
            {"origin_base_url": "ftp://blog.example.com"},
            {"site_base_url": "/relative"},
            {"fallback_status_code": 500},
            {"max_redirects": -1},
            {"upstream_timeout": 0},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            MountConfig(**kwargs)


class TestFromEnv:
    def test_reads_environment_values(self, monkeypatch):
        monkeypatch.setattr(config_module.env, "MOUNT_PREFIX", "/news/")
        monkeypatch.setattr(config_module.env, "ORIGIN_BASE_URL", "https://news.example.org")
        monkeypatch.setattr(config_module.env, "SITE_BASE_URL", "https://example.org")
        monkeypatch.setattr(config_module.env, "ROUTE_PREFIXES", ["/apps/news"])
        monkeypatch.setattr(config_module.env, "DEFAULT_CACHE_TTL", "60")
        monkeypatch.setattr(config_module.env, "UPSTREAM_TIMEOUT", "2.5")
        monkeypatch.setattr(config_module.env, "UPSTREAM_MAX_REDIRECTS", "3")
        monkeypatch.setattr(config_module.env, "FALLBACK_STATUS_CODE", "502")

        config = MountConfig.from_env()

        assert config.mount_prefix == "/news"
        assert config.origin_host == "news.example.org"
        assert config.route_prefixes == ("/apps/news", "/news")
        assert config.default_cache_ttl == 60
        assert config.upstream_timeout == 2.5
        assert config.max_redirects == 3
        assert config.fallback_status_code == 502

    def test_non_numeric_value_is_configuration_error(self, monkeypatch):
        monkeypatch.setattr(config_module.env, "UPSTREAM_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="UPSTREAM_TIMEOUT"):
            MountConfig.from_env()
