"""
Unit tests for config.py (Settings validators).
"""

import pytest
from pydantic import ValidationError

from pitchly.core.config import Settings


def test_key_file_is_read_when_key_missing(tmp_path):
    key_file = tmp_path / "openai.key"
    key_file.write_text("  sk-test-123\n", encoding="utf-8")

    config = Settings(OPENAI_API_KEY="", OPENAI_API_KEY_PATH=str(key_file))

    assert config.OPENAI_API_KEY == "sk-test-123"


def test_explicit_key_wins_over_file(tmp_path):
    config = Settings(OPENAI_API_KEY=" sk-env ", OPENAI_API_KEY_PATH=str(tmp_path / "missing.key"))
    assert config.OPENAI_API_KEY == "sk-env"


def test_missing_key_file_rejected(tmp_path):
    with pytest.raises(ValidationError, match="OPENAI_API_KEY_PATH"):
        Settings(OPENAI_API_KEY="", OPENAI_API_KEY_PATH=str(tmp_path / "missing.key"))


def test_provider_is_normalized():
    assert Settings(QUOTE_PROVIDER=" YFinance ").QUOTE_PROVIDER == "yfinance"
    with pytest.raises(ValidationError):
        Settings(QUOTE_PROVIDER="bloomberg")


def test_negative_retry_settings_rejected():
    with pytest.raises(ValidationError):
        Settings(QUOTE_MAX_RETRIES=-1)
