"""
Unit tests for environment variable resolution in the file search config.

Tests .env parsing, process-env precedence and the typed config accessors.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch
import pytest

from file_search.infrastructure.config import (
    DEFAULT_EXTENSIONS,
    candidate_limit,
    db_path,
    embed_model,
    env_get,
    env_int,
    generation_model,
    ollama_url,
    parse_dotenv,
    supported_extensions,
    text_max,
)
from file_search.infrastructure.timeouts import http_timeout_seconds


class TestDotenvParsing:
    """Test .env file parsing functionality."""

    def test_parse_empty_dotenv(self):
        """Test parsing an empty .env file returns empty dict."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
            f.write("")
            temp_path = Path(f.name)

        try:
            assert parse_dotenv(temp_path) == {}
        finally:
            temp_path.unlink()

    def test_parse_simple_dotenv(self):
        """Test parsing basic KEY=VALUE pairs with quotes and comments."""
        content = """
# Comment line
FILE_SEARCH_DB=/tmp/index.sqlite3
EMBED_MODEL="mxbai-embed-large"
OLLAMA_URL='http://localhost:11434'

# Another comment
GENERATION_MODEL=llama3
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
            f.write(content)
            temp_path = Path(f.name)

        try:
            assert parse_dotenv(temp_path) == {
                'FILE_SEARCH_DB': '/tmp/index.sqlite3',
                'EMBED_MODEL': 'mxbai-embed-large',
                'OLLAMA_URL': 'http://localhost:11434',
                'GENERATION_MODEL': 'llama3',
            }
        finally:
            temp_path.unlink()

    def test_parse_malformed_lines_ignored(self):
        content = """
VALID_KEY=valid_value
invalid line without equals
=MISSING_KEY
EMPTY_VALUE=
KEY_WITH_SPACES = spaced value
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
            f.write(content)
            temp_path = Path(f.name)

        try:
            assert parse_dotenv(temp_path) == {
                'VALID_KEY': 'valid_value',
                'EMPTY_VALUE': '',
                'KEY_WITH_SPACES': 'spaced value',
            }
        finally:
            temp_path.unlink()

    def test_parse_nonexistent_file(self):
        """Test parsing nonexistent file returns empty dict."""
        assert parse_dotenv(Path("/nonexistent/path/.env")) == {}


class TestEnvironmentGet:
    """Test environment variable retrieval with .env fallback."""

    @patch.dict(os.environ, {'TEST_VAR': 'from_env'})
    def test_env_get_from_process_env(self):
        """Test retrieval from process environment takes precedence."""
        with patch('file_search.infrastructure.config.parse_dotenv') as mock_parse:
            mock_parse.return_value = {'TEST_VAR': 'from_dotenv'}
            assert env_get('TEST_VAR') == 'from_env'

    @patch.dict(os.environ, {}, clear=True)
    def test_env_get_from_dotenv_fallback(self):
        """Test fallback to .env when not in process environment."""
        with patch('file_search.infrastructure.config.parse_dotenv') as mock_parse:
            mock_parse.return_value = {'TEST_VAR': 'from_dotenv'}
            assert env_get('TEST_VAR') == 'from_dotenv'

    @patch.dict(os.environ, {}, clear=True)
    def test_env_get_missing_key(self):
        """Test missing key returns None."""
        with patch('file_search.infrastructure.config.parse_dotenv') as mock_parse:
            mock_parse.return_value = {}
            assert env_get('MISSING_KEY') is None

    @patch.dict(os.environ, {'EMPTY_VAR': '   '})
    def test_env_get_strips_whitespace(self, clean_environment):
        """Test whitespace-only values count as unset."""
        assert env_get('EMPTY_VAR') is None  # whitespace-only counts as unset

    def test_dotenv_in_working_directory(self, clean_environment):
        """Test .env in the working directory is read."""
        (clean_environment / ".env").write_text("EMBED_MODEL=all-minilm\n")
        assert embed_model() == "all-minilm"


class TestDefaults:
    """Accessors fall back to documented defaults when nothing is configured."""

    def test_defaults(self, clean_environment):
        """Test every accessor's default value."""
        assert ollama_url() == "http://localhost:11434"
        assert embed_model() == "nomic-embed-text"
        assert generation_model() == "mistral"
        assert db_path() == Path("~/.file_search/index.sqlite3").expanduser()
        assert text_max() == 50000
        assert candidate_limit() == 200
        assert supported_extensions() == DEFAULT_EXTENSIONS
        assert http_timeout_seconds() == 15.0

    def test_default_extensions(self):
        """Test the default extension allow-list."""
        assert {"pdf", "docx", "md", "txt", "rtf", "png", "jpg", "heic"} <= DEFAULT_EXTENSIONS
        assert "exe" not in DEFAULT_EXTENSIONS


class TestOverrides:
    """Test environment overrides of config values."""

    def test_ollama_url_trailing_slash_removed(self, clean_environment, monkeypatch):
        """Test trailing slash is trimmed from OLLAMA_URL."""
        monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434/")
        assert ollama_url() == "http://gpu-box:11434"

    def test_db_path_expands_user(self, clean_environment, monkeypatch):
        """Test ~ is expanded in FILE_SEARCH_DB."""
        monkeypatch.setenv("FILE_SEARCH_DB", "~/custom.sqlite3")
        assert db_path() == Path("~/custom.sqlite3").expanduser()

    def test_integer_settings(self, clean_environment, monkeypatch):
        """Test integer settings are parsed."""
        monkeypatch.setenv("FILE_SEARCH_TEXT_MAX", "1000")
        monkeypatch.setenv("FILE_SEARCH_CANDIDATE_LIMIT", "25")
        assert text_max() == 1000
        assert candidate_limit() == 25

    def test_invalid_integer_falls_back(self, clean_environment, monkeypatch):
        """Test non-numeric integers fall back to defaults."""
        monkeypatch.setenv("FILE_SEARCH_TEXT_MAX", "lots")
        assert text_max() == 50000
        assert env_int("FILE_SEARCH_TEXT_MAX", 7) == 7

    def test_extension_list(self, clean_environment, monkeypatch):
        """Test extension list is normalized."""
        monkeypatch.setenv("FILE_SEARCH_EXTENSIONS", " .PDF, md ,,txt")
        assert supported_extensions() == frozenset({"pdf", "md", "txt"})

    def test_blank_extension_list_uses_default(self, clean_environment, monkeypatch):
        """Test an empty extension list keeps the defaults."""
        monkeypatch.setenv("FILE_SEARCH_EXTENSIONS", " , ")
        assert supported_extensions() == DEFAULT_EXTENSIONS

    @pytest.mark.parametrize("raw", ["0", "-3", "soon"])
    def test_invalid_timeout_falls_back(self, clean_environment, monkeypatch, raw):
        """Test invalid or non-positive timeouts fall back to 15s."""
        monkeypatch.setenv("FILE_SEARCH_HTTP_TIMEOUT", raw)
        assert http_timeout_seconds() == 15.0

    def test_timeout_override(self, clean_environment, monkeypatch):
        """Test a valid timeout override."""
        monkeypatch.setenv("FILE_SEARCH_HTTP_TIMEOUT", "2.5")
        assert http_timeout_seconds() == 2.5
