"""
Tests for configuration module.
"""

from resume_builder.config import Settings, get_settings


class TestSettings:
    """Test the Settings configuration class."""

    def test_default_settings(self):
        """Test default settings initialization."""
        settings = Settings(_env_file=None, gemini_api_key="", gemini_api_keys="")

        assert settings.gemini_model == "gemini-2.0-flash"
        assert settings.ai_retry_attempts == 3
        assert settings.max_upload_bytes == 10 * 1024 * 1024
        assert settings.min_upload_bytes == 100
        assert settings.get_gemini_api_keys() == []

    def test_settings_from_env(self, monkeypatch):
        """Test loading settings from environment variables."""
        monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-pro")
        monkeypatch.setenv("AI_REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("AI_VISION_FALLBACK", "false")

        settings = Settings(_env_file=None)

        assert settings.gemini_model == "gemini-1.5-pro"
        assert settings.ai_request_timeout == 12.5
        assert settings.ai_vision_fallback is False

    def test_gemini_key_parsing(self):
        """Test comma-separated keys, with the multi-key setting taking precedence."""
        settings = Settings(_env_file=None, gemini_api_key="single", gemini_api_keys="a, b,,c ")
        assert settings.get_gemini_api_keys() == ["a", "b", "c"]

        settings = Settings(_env_file=None, gemini_api_key="single", gemini_api_keys="")
        assert settings.get_gemini_api_keys() == ["single"]

    def test_cors_origins_parsing(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")

        assert settings.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
