"""Tests for environment-driven settings."""

import pytest

from fincalc.config import (
    CacheSettings,
    ComputationSettings,
    SecuritySettings,
    Settings,
    get_settings,
    validate_all_settings,
)


class TestDefaults:
    """Tests for default limits."""

    def test_security_defaults(self):
        settings = SecuritySettings()

        assert settings.max_principal == 1e9
        assert settings.min_interest_rate == -0.5
        assert settings.max_interest_rate == 2.0
        assert settings.max_projection_years == 100
        assert settings.max_iterations == 10000
        assert settings.overflow_ceiling == 1e15
        assert settings.rate_limit_max_requests == 100
        assert settings.rate_limit_window_seconds == 60

    def test_cache_defaults(self):
        settings = CacheSettings()
        assert settings.enabled
        assert settings.max_entries == 1000
        assert settings.ttl_seconds is None

    def test_computation_defaults(self):
        settings = ComputationSettings()
        assert settings.max_payoff_months == 1200
        assert settings.default_inflation_rate == 0.03
        assert settings.max_metrics is None

    def test_root_container(self):
        settings = Settings()
        assert isinstance(settings.security, SecuritySettings)
        assert isinstance(settings.cache, CacheSettings)
        assert isinstance(settings.computation, ComputationSettings)


class TestEnvironment:
    """Tests for environment overrides and validation."""

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FINCALC_SECURITY_MAX_PRINCIPAL", "5000")
        monkeypatch.setenv("FINCALC_CACHE_TTL_SECONDS", "30")

        assert SecuritySettings().max_principal == 5000
        assert CacheSettings().ttl_seconds == 30

    def test_inverted_rate_range_rejected(self):
        with pytest.raises(ValueError, match="min_interest_rate"):
            SecuritySettings(min_interest_rate=1.0, max_interest_rate=0.5)

    def test_non_positive_ttl_rejected(self):
        with pytest.raises(ValueError, match="ttl_seconds"):
            CacheSettings(ttl_seconds=0)

    def test_validate_all_settings(self, monkeypatch):
        """Test startup validation reports the broken group."""
        assert validate_all_settings() == {
            "security": True,
            "cache": True,
            "computation": True,
        }

        monkeypatch.setenv("FINCALC_SECURITY_MIN_INTEREST_RATE", "5")
        results = validate_all_settings()
        assert results["security"] is False
        assert isinstance(results["security_error"], str)
        assert "min_interest_rate" in results["security_error"]
        assert results["cache"] is True

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
