"""
Tests for Config validation.
"""

from dataclasses import FrozenInstanceError

import pytest

from kousu.config import Config


def config(**overrides):
    settings = dict(ma_url='https://ma.example.com/maeyes/', ma_user='user', ma_pass='secret', year=2020, month=8)
    settings.update(overrides)
    return Config(**settings)


class TestConfig:
    """Tests for Config."""

    def test_valid(self):
        """Test that a complete configuration validates."""
        config().validate()

    def test_defaults(self):
        """Test the browser defaults."""
        default = Config()

        assert default.headless is False
        assert default.handle_sigint is True
        assert default.overlay_timeout == 30000
        assert default.commit_timeout == 3000

    def test_frozen(self):
        """Test that the configuration cannot be modified."""
        with pytest.raises(FrozenInstanceError):
            config().month = 9

    def test_url_required(self):
        """Test that the URL is required."""
        with pytest.raises(ValueError, match="URL is required"):
            config(ma_url='').validate()

    @pytest.mark.parametrize('field', ['ma_user', 'ma_pass'])
    def test_credentials_required(self, field):
        """Test that user and password are required for a form login."""
        with pytest.raises(ValueError, match="User and password"):
            config(**{field: ''}).validate()

    def test_cookie_load_replaces_credentials(self):
        """Test that credentials are optional when a session is restored."""
        config(ma_user='', ma_pass='', cookie_load='cookies.json').validate()

    def test_cookie_load_and_save_conflict(self):
        """Test that loading and saving cookies at once is rejected."""
        with pytest.raises(ValueError, match="--z-cookie-load"):
            config(cookie_load='a.json', cookie_save='b.json').validate()

    def test_connect_url_and_headless_conflict(self):
        """Test that an attached browser cannot be headless."""
        with pytest.raises(ValueError, match="--z-headless"):
            config(connect_url='http://localhost:9222', headless=True).validate()

    def test_connect_url_and_no_sigint_conflict(self):
        """Test that --no-z-handle-sigint needs a launched browser."""
        with pytest.raises(ValueError, match="--no-z-handle-sigint"):
            config(connect_url='http://localhost:9222', handle_sigint=False).validate()

    @pytest.mark.parametrize('month', [0, 13])
    def test_month_range(self, month):
        """Test that the month must be 1-12."""
        with pytest.raises(ValueError, match="Month must be between"):
            config(month=month).validate()

    def test_year_range(self):
        """Test that the year must be plausible."""
        with pytest.raises(ValueError, match="Year must be between"):
            config(year=1999).validate()

    def test_timeouts_positive(self):
        """Test that timeouts must be positive."""
        with pytest.raises(ValueError, match="overlay_timeout"):
            config(overlay_timeout=0).validate()
