"""
Storefront Backend: Settings Tests
====================================

What:  Blank environment values fall back to defaults instead of breaking
       startup; base URLs are normalized.
"""

import pytest

from storefront.config import Settings
from storefront.services.email_service import EmailService, NotificationKind, TransportConfig


@pytest.fixture
def blank_env(monkeypatch):
    for name in ("EMAIL_HOST", "EMAIL_PORT", "CLIENT_URL"):
        monkeypatch.setenv(name, "")


class TestBlankValues:

    def test_blank_email_port_uses_587(self, blank_env):
        config = Settings(_env_file=None)
        assert config.email_port == 587

    def test_blank_email_host_uses_gmail(self, blank_env):
        config = Settings(_env_file=None)
        assert config.email_host == "smtp.gmail.com"

    def test_blank_client_url_uses_default(self, blank_env):
        config = Settings(_env_file=None)
        assert config.client_url == "http://localhost:5173"

    def test_blank_values_reach_email_links(self, blank_env):
        config = Settings(_env_file=None, email_user="shop@example.com", email_pass="secret")

        transport = TransportConfig.from_settings(config)
        url = EmailService(config=config).build_action_url(NotificationKind.VERIFICATION, "abc123")

        assert transport.port == 587
        assert transport.secure is False
        assert url == "http://localhost:5173/verify-email/abc123"

    def test_explicit_values_still_apply(self, monkeypatch):
        monkeypatch.setenv("EMAIL_PORT", "465")
        monkeypatch.setenv("CLIENT_URL", "https://shop.example.com/")

        config = Settings(_env_file=None)

        assert config.email_port == 465
        assert config.client_url == "https://shop.example.com"

    def test_invalid_port_still_rejected(self, monkeypatch):
        monkeypatch.setenv("EMAIL_PORT", "not-a-port")
        with pytest.raises(ValueError):
            Settings(_env_file=None)
