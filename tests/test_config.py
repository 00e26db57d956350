"""Tests for ScanConfig loading and validation."""

import pytest

from metadefender_scan.config import METADEFENDER_BASE_URL, ScanConfig
from metadefender_scan.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for var in (
        "METADEFENDER_BASE_URL",
        "METADEFENDER_REQUEST_TIMEOUT",
        "METADEFENDER_POLL_INTERVAL",
        "METADEFENDER_MAX_WAIT",
        "METADEFENDER_MAX_POLL_FAILURES",
    ):
        monkeypatch.delenv(var, raising=False)
    # keep load_dotenv from discovering a developer's .env
    monkeypatch.setattr("metadefender_scan.config.load_dotenv", lambda *a, **k: False)


class TestDefaults:
    def test_defaults(self) -> None:
        config = ScanConfig()
        assert config.base_url == METADEFENDER_BASE_URL
        assert config.poll_interval == 10
        assert config.request_timeout == 60
        assert config.max_wait == 900
        assert config.max_poll_failures == 5
        config.validate()

    def test_api_root_strips_trailing_slash(self) -> None:
        config = ScanConfig(base_url="https://md.example.com/v4/", _loaded=True)
        assert config.api_root == "https://md.example.com/v4"


class TestEnvOverrides:
    def test_env_overrides_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("METADEFENDER_BASE_URL", "https://md.example.com/v4")
        monkeypatch.setenv("METADEFENDER_POLL_INTERVAL", "3")
        monkeypatch.setenv("METADEFENDER_MAX_POLL_FAILURES", "8")
        config = ScanConfig()
        assert config.base_url == "https://md.example.com/v4"
        assert config.poll_interval == 3
        assert config.max_poll_failures == 8

    def test_explicit_values_win_over_env(self, monkeypatch) -> None:
        monkeypatch.setenv("METADEFENDER_POLL_INTERVAL", "3")
        config = ScanConfig(poll_interval=20)
        assert config.poll_interval == 20

    def test_non_integer_env_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("METADEFENDER_MAX_WAIT", "ten minutes")
        with pytest.raises(ConfigurationError, match="METADEFENDER_MAX_WAIT"):
            ScanConfig()

    def test_loaded_flag_skips_env(self, monkeypatch) -> None:
        monkeypatch.setenv("METADEFENDER_POLL_INTERVAL", "3")
        assert ScanConfig(_loaded=True).poll_interval == 10

    def test_missing_env_file_warns(self, caplog, tmp_path) -> None:
        ScanConfig(env_file=str(tmp_path / "missing.env"))
        assert "not found" in caplog.text


class TestValidate:
    def test_rejects_bad_scheme(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid base URL"):
            ScanConfig(base_url="api.metadefender.com", _loaded=True).validate()

    @pytest.mark.parametrize(
        "field", ["request_timeout", "poll_interval", "max_wait", "max_poll_failures"]
    )
    def test_rejects_non_positive(self, field: str) -> None:
        config = ScanConfig(_loaded=True)
        setattr(config, field, 0)
        with pytest.raises(ConfigurationError, match=field):
            config.validate()
