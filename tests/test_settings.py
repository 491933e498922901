import pytest

from src.settings import DEFAULT_BACKEND_URL, get_setting, load_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DIGITALLAB_BACKEND_URL", raising=False)
        monkeypatch.delenv("DIGITALLAB_TOAST_SECONDS", raising=False)

        settings = load_settings()

        assert settings.api_base_url == DEFAULT_BACKEND_URL
        assert settings.toast_seconds == 5.0
        assert settings.max_image_bytes == 5 * 1024 * 1024
        assert settings.resource_url(settings.review_path) == "http://localhost:4000/api/review"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DIGITALLAB_BACKEND_URL", "https://api.example.com/")
        monkeypatch.setenv("DIGITALLAB_REQUEST_TIMEOUT_SECONDS", "3.5")

        settings = load_settings()

        assert settings.api_base_url == "https://api.example.com"
        assert settings.uploads_base_url == "https://api.example.com/uploads"
        assert settings.request_timeout_seconds == 3.5

    def test_malformed_numbers_fall_back(self, monkeypatch, caplog):
        monkeypatch.setenv("DIGITALLAB_TOAST_SECONDS", "soon")
        monkeypatch.setenv("DIGITALLAB_MAX_IMAGE_BYTES", "-1")

        settings = load_settings()

        assert settings.toast_seconds == 5.0
        assert settings.max_image_bytes == 5 * 1024 * 1024
        assert "DIGITALLAB_TOAST_SECONDS" in caplog.text

    def test_missing_setting_without_default_raises(self, monkeypatch):
        monkeypatch.delenv("DIGITALLAB_NOT_SET", raising=False)
        with pytest.raises(RuntimeError):
            get_setting("DIGITALLAB_NOT_SET")

    def test_non_positive_numbers_are_logged(self, monkeypatch, caplog):
        monkeypatch.setenv("DIGITALLAB_MAX_IMAGE_BYTES", "0")
        monkeypatch.setenv("DIGITALLAB_REQUEST_TIMEOUT_SECONDS", "-2")

        settings = load_settings()

        assert settings.max_image_bytes == 5 * 1024 * 1024
        assert "Non-positive DIGITALLAB_MAX_IMAGE_BYTES='0'" in caplog.text
        assert "Non-positive DIGITALLAB_REQUEST_TIMEOUT_SECONDS='-2'" in caplog.text
