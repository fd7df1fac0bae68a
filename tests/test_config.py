"""Tests for src.config — settings parsing and required keys."""

import pytest

from src.config import Settings, _load_settings


def _settings(**overrides):
    values = {
        "WHATSAPP_ACCESS_TOKEN": "tok",
        "WHATSAPP_PHONE_NUMBER_ID": "123",
        "AUTHORIZED_USER_NUMBER": "15550001111",
        "LLM_API_KEY": "key",
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:
    def test_defaults(self):
        s = _settings()
        assert s.SELF_CHAT_MODE is False
        assert s.SPENDING_ALERT_THRESHOLD == 100.0
        assert s.UNNECESSARY_SPENDING_CATEGORIES == []
        assert s.PORT == 3000
        assert s.PLAID_ENV == "sandbox"

    def test_number_plus_is_stripped(self):
        assert _settings(AUTHORIZED_USER_NUMBER="+1 555").AUTHORIZED_USER_NUMBER == "1 555"

    def test_categories_parsed(self):
        s = _settings(UNNECESSARY_SPENDING_CATEGORIES=" Shops, Food and Drink ,,")
        assert s.UNNECESSARY_SPENDING_CATEGORIES == ["shops", "food and drink"]

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False), ("", False)])
    def test_self_chat_flag(self, raw, expected):
        assert _settings(SELF_CHAT_MODE=raw).SELF_CHAT_MODE is expected

    def test_numbers_parsed(self):
        s = _settings(SPENDING_ALERT_THRESHOLD="50", MAX_SOCIAL_MEDIA_HOURS_PER_DAY="1.5", PORT="8080")
        assert s.SPENDING_ALERT_THRESHOLD == 50.0
        assert s.MAX_SOCIAL_MEDIA_HOURS_PER_DAY == 1.5
        assert s.PORT == 8080


class TestLoadSettings:
    def test_loads_from_env(self, monkeypatch):
        monkeypatch.setenv("AUTHORIZED_USER_NUMBER", "+15550002222")
        monkeypatch.setenv("SELF_CHAT_MODE", "true")
        s = _load_settings()
        assert s.AUTHORIZED_USER_NUMBER == "15550002222"
        assert s.SELF_CHAT_MODE is True

    def test_missing_required_key_exits(self, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_placeholder_value_exits(self, monkeypatch):
        monkeypatch.setenv("WHATSAPP_ACCESS_TOKEN", "your-token-here")
        with pytest.raises(SystemExit):
            _load_settings()
