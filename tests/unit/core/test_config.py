import pytest
from pydantic import ValidationError

from netmonitor.core.config import Settings, settings


class TestSettings:
    """Test Settings configuration class."""

    def test_default_values(self):
        config = Settings(_env_file=None)

        assert config.usage_query_page_size == 100
        assert config.usage_stats_refetch_interval_s == 120
        assert config.activity_stats_refetch_interval_s == 120
        assert config.usage_keys_path == "usage_keys.json"
        assert config.activity_keys_path == "activity_keys.json"
        assert config.rpc_max_retries == 3
        assert config.api_port == 3000
        assert config.http_timeout_seconds is None
        assert config.otel_service_name == "netmonitor"

    def test_wallet_and_bridge_defaults(self):
        config = Settings(_env_file=None)

        assert config.reth_url == "http://localhost:8545"
        assert config.deposit_paymaster_wallet == "0x" + "0" * 40
        assert config.balances_refetch_interval_s == 10
        assert config.bridge_status_refetch_interval_s == 120
        assert config.bridge_operator_ping_timeout_s == 10.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("USER_OPS_QUERY_URL", "http://indexer.example/ops")
        monkeypatch.setenv("USAGE_QUERY_PAGE_SIZE", "25")
        monkeypatch.setenv("USAGE_STATS_REFETCH_INTERVAL_S", "30")

        config = Settings(_env_file=None)

        assert config.user_ops_query_url == "http://indexer.example/ops"
        assert config.usage_query_page_size == 25
        assert config.usage_stats_refetch_interval_s == 30

    @pytest.mark.parametrize(
        "field",
        [
            "usage_query_page_size",
            "usage_stats_refetch_interval_s",
            "status_refetch_interval_s",
            "balances_refetch_interval_s",
            "bridge_operator_ping_timeout_s",
        ],
    )
    def test_non_positive_values_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_redaction_patterns(self):
        config = Settings(_env_file=None)
        for pattern in ["password", "secret", "authorization", "cookie", "api_key"]:
            assert pattern in config.app_log_redaction_patterns
        # page tokens and key-file paths are logged in the clear
        assert "token" not in config.app_log_redaction_patterns

    def test_settings_singleton(self):
        assert isinstance(settings, Settings)
        assert hasattr(settings, "accounts_query_url")
