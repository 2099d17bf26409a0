"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from gdrive_client.config import AppConfig, load_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "GDC_AUTH_MODE": "service_account",
    "GDC_CREDENTIALS_FILE": "/secrets/key.json",
}


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_defaults_match_client_constants(self) -> None:
        config = AppConfig(auth_mode="oauth", credentials_file="client.json")
        assert config.token_file is None
        assert config.subject is None
        assert config.request_timeout == 60.0
        assert config.chunk_size == 1024 * 1024
        assert config.list_page_size == 100
        assert config.folder_page_size == 1000
        assert config.root_path == "My Drive"
        assert config.max_path_depth == 10

    def test_is_frozen(self) -> None:
        config = AppConfig(auth_mode="oauth", credentials_file="client.json")
        with pytest.raises(AttributeError):
            config.auth_mode = "service_account"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.auth_mode == "service_account"
        assert config.credentials_file == "/secrets/key.json"
        assert config.list_page_size == 100

    def test_reads_optional_overrides(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "GDC_TOKEN_FILE": "/secrets/token.json",
            "GDC_SUBJECT": "admin@example.com",
            "GDC_REQUEST_TIMEOUT": "15.5",
            "GDC_CHUNK_SIZE": "65536",
            "GDC_LIST_PAGE_SIZE": "50",
            "GDC_FOLDER_PAGE_SIZE": "500",
            "GDC_ROOT_PATH": "Shared",
            "GDC_MAX_PATH_DEPTH": "4",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.token_file == "/secrets/token.json"
        assert config.subject == "admin@example.com"
        assert config.request_timeout == 15.5
        assert config.chunk_size == 65536
        assert config.list_page_size == 50
        assert config.folder_page_size == 500
        assert config.root_path == "Shared"
        assert config.max_path_depth == 4

    def test_empty_optional_values_become_none(self) -> None:
        env = {**_REQUIRED_ENV, "GDC_TOKEN_FILE": "", "GDC_SUBJECT": ""}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.token_file is None
        assert config.subject is None

    @pytest.mark.parametrize("missing", ["GDC_AUTH_MODE", "GDC_CREDENTIALS_FILE"])
    def test_raises_key_error_when_required_missing(self, missing: str) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != missing}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()
