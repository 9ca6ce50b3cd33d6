"""Tests for tagsync/config.py — Settings validation."""
from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from tagsync.config import Settings


class TestDefaults:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None)
        assert s.db_url == "sqlite:////app/data/tagsync.db"
        assert s.data_dir == Path("/app/data")
        assert s.user_id_header == "X-User-Id"
        assert s.sqlite_busy_timeout_ms == 5000
        assert s.log_level == "INFO"

    def test_env_overrides(self):
        env = {
            "DB_URL": "sqlite:///tmp/x.db",
            "USER_ID_HEADER": "X-Forwarded-User",
            "SQLITE_BUSY_TIMEOUT_MS": "250",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)
        assert s.db_url == "sqlite:///tmp/x.db"
        assert s.user_id_header == "X-Forwarded-User"
        assert s.sqlite_busy_timeout_ms == 250


class TestValidation:
    def test_log_level_is_normalized(self):
        with patch.dict(os.environ, {"LOG_LEVEL": " debug "}, clear=True):
            assert Settings(_env_file=None).log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}, clear=True):
            with pytest.raises(ValueError, match="Unknown LOG_LEVEL"):
                Settings(_env_file=None)

    def test_negative_busy_timeout_rejected(self):
        with patch.dict(os.environ, {"SQLITE_BUSY_TIMEOUT_MS": "-1"}, clear=True):
            with pytest.raises(ValueError, match="SQLITE_BUSY_TIMEOUT_MS"):
                Settings(_env_file=None)
