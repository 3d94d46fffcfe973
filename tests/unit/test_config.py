"""Unit tests for configuration management."""

import pytest

from src.utils.config import Config

FLOWISE_VARS = (
    "FLOWISE_API_URL",
    "FLOWISE_API_KEY",
    "FLOWISE_RECIPE_FLOW_ID",
    "FLOWISE_MOTIVATION_FLOW_ID",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable Config reads so defaults apply."""
    for name in FLOWISE_VARS + (
        "REQUEST_TIMEOUT_SECONDS",
        "TEMPERATURE",
        "MAX_TOKENS",
        "ENABLE_STREAMING",
        "STREAM_STRICT_FRAMES",
        "CACHE_TTL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, clean_env):
        """Test that Config uses default values when env vars not set."""
        config = Config()

        assert config.FLOWISE_API_URL == ""
        assert config.FLOWISE_API_KEY == ""
        assert config.REQUEST_TIMEOUT_SECONDS == 60
        assert config.TEMPERATURE == 0.5
        assert config.MAX_TOKENS == 800
        assert config.ENABLE_STREAMING is True
        assert config.STREAM_STRICT_FRAMES is False
        assert config.CACHE_TTL_SECONDS == 300

    def test_config_loads_from_environment(self, clean_env):
        """Test that Config loads values from environment variables."""
        clean_env.setenv("FLOWISE_API_URL", "https://flowise.example.com/")
        clean_env.setenv("FLOWISE_API_KEY", "secret")
        clean_env.setenv("FLOWISE_RECIPE_FLOW_ID", "recipe-flow")
        clean_env.setenv("REQUEST_TIMEOUT_SECONDS", "30")
        clean_env.setenv("TEMPERATURE", "0.2")
        clean_env.setenv("MAX_TOKENS", "1200")
        clean_env.setenv("ENABLE_STREAMING", "false")
        clean_env.setenv("STREAM_STRICT_FRAMES", "yes")
        clean_env.setenv("CACHE_TTL_SECONDS", "60")

        config = Config()

        assert config.FLOWISE_API_URL == "https://flowise.example.com"
        assert config.FLOWISE_API_KEY == "secret"
        assert config.FLOWISE_RECIPE_FLOW_ID == "recipe-flow"
        assert config.REQUEST_TIMEOUT_SECONDS == 30
        assert config.TEMPERATURE == 0.2
        assert config.MAX_TOKENS == 1200
        assert config.ENABLE_STREAMING is False
        assert config.STREAM_STRICT_FRAMES is True
        assert config.CACHE_TTL_SECONDS == 60

    def test_config_converts_numeric_types(self, clean_env):
        """Test that numeric env vars are converted to int/float."""
        clean_env.setenv("REQUEST_TIMEOUT_SECONDS", "45")
        clean_env.setenv("TEMPERATURE", "0.7")

        config = Config()

        assert isinstance(config.REQUEST_TIMEOUT_SECONDS, int)
        assert isinstance(config.TEMPERATURE, float)


class TestFlowiseConfigured:
    """Completeness of the Flowise connection settings."""

    def test_not_configured_by_default(self, clean_env):
        """Test that Flowise is reported unconfigured with no env vars."""
        config = Config()

        assert config.flowise_configured is False
        assert config.motivation_configured is False

    @pytest.mark.parametrize("missing", ["FLOWISE_API_URL", "FLOWISE_API_KEY", "FLOWISE_RECIPE_FLOW_ID"])
    def test_any_missing_setting_disables_recipe_flow(self, clean_env, missing):
        """Test that any one missing Flowise setting selects the mock path."""
        for name in ("FLOWISE_API_URL", "FLOWISE_API_KEY", "FLOWISE_RECIPE_FLOW_ID"):
            if name != missing:
                clean_env.setenv(name, "value")

        assert Config().flowise_configured is False

    def test_all_settings_enable_recipe_flow(self, clean_env):
        """Test that URL, key and recipe flow id together enable live generation."""
        clean_env.setenv("FLOWISE_API_URL", "https://flowise.example.com")
        clean_env.setenv("FLOWISE_API_KEY", "secret")
        clean_env.setenv("FLOWISE_RECIPE_FLOW_ID", "recipe-flow")

        config = Config()

        assert config.flowise_configured is True
        assert config.motivation_configured is False

    def test_motivation_flow_needs_its_own_id(self, clean_env):
        """Test that the motivation flow requires its own flow id."""
        clean_env.setenv("FLOWISE_API_URL", "https://flowise.example.com")
        clean_env.setenv("FLOWISE_API_KEY", "secret")
        clean_env.setenv("FLOWISE_MOTIVATION_FLOW_ID", "motivation-flow")

        assert Config().motivation_configured is True


class TestConfigValidation:
    """Test Config validation logic."""

    def test_missing_credentials_are_valid(self, clean_env):
        """Missing Flowise settings select the mock path; validate() must not raise."""
        Config().validate()

    def test_validate_rejects_temperature_out_of_range(self, clean_env):
        """Test that validate() rejects a temperature outside 0.0-1.0."""
        clean_env.setenv("TEMPERATURE", "1.5")

        with pytest.raises(ValueError, match="TEMPERATURE"):
            Config().validate()

    def test_validate_rejects_zero_timeout(self, clean_env):
        """Test that validate() rejects a zero request timeout."""
        clean_env.setenv("REQUEST_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValueError, match="REQUEST_TIMEOUT_SECONDS"):
            Config().validate()

    def test_validate_rejects_zero_max_tokens(self, clean_env):
        """Test that validate() rejects zero max tokens."""
        clean_env.setenv("MAX_TOKENS", "0")

        with pytest.raises(ValueError, match="MAX_TOKENS"):
            Config().validate()

    def test_validate_rejects_non_positive_ttl(self, clean_env):
        """Test that validate() rejects a non-positive cache TTL."""
        clean_env.setenv("CACHE_TTL_SECONDS", "0")

        with pytest.raises(ValueError, match="CACHE_TTL_SECONDS"):
            Config().validate()
