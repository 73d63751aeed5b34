"""Tests for SluiceConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from sluice.core.config import SluiceConfig


class TestSluiceConfig:
    def test_default_values(self):
        config = SluiceConfig()
        assert config.log_level == "INFO"
        assert config.log_json is False
        assert config.log_dir is None
        assert config.log_calls is False
        assert config.allowed_user_ids == set()
        assert config.rate_limit_rpm == 0
        assert config.rate_limit_burst == 5

    def test_log_level_normalized(self):
        assert SluiceConfig(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError, match="unknown log level"):
            SluiceConfig(log_level="LOUD")

    def test_allowed_user_ids_from_csv(self):
        config = SluiceConfig(allowed_user_ids="alice, bob,,")
        assert config.allowed_user_ids == {"alice", "bob"}

    def test_allowed_user_ids_from_int(self):
        assert SluiceConfig(allowed_user_ids=12345).allowed_user_ids == {"12345"}

    def test_negative_rate_limit_rejected(self):
        with pytest.raises(ValueError, match="must not be negative"):
            SluiceConfig(rate_limit_rpm=-1)

    def test_env_vars_loaded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SLUICE_LOG_LEVEL", "warning")
        monkeypatch.setenv("SLUICE_RATE_LIMIT_RPM", "30")
        monkeypatch.setenv("SLUICE_ALLOWED_USER_IDS", "u1,u2")
        monkeypatch.setenv("SLUICE_LOG_DIR", str(tmp_path))
        config = SluiceConfig()
        assert config.log_level == "WARNING"
        assert config.rate_limit_rpm == 30
        assert config.allowed_user_ids == {"u1", "u2"}
        assert config.log_dir == Path(tmp_path)
