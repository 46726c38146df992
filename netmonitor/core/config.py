from pydantic import Field

from shared.config import BaseServiceConfig


class Settings(BaseServiceConfig):
    # Account-abstraction indexer
    user_ops_query_url: str = (
        "http://localhost/api/v2/proxy/account-abstraction/operations"
    )
    accounts_query_url: str = (
        "http://localhost/api/v2/proxy/account-abstraction/accounts"
    )
    usage_query_page_size: int = Field(100, gt=0)

    # Stats refresh
    usage_stats_refetch_interval_s: int = Field(120, gt=0)
    activity_stats_refetch_interval_s: int = Field(120, gt=0)

    # Key-mapping files (enum key -> output label)
    usage_keys_path: str = "usage_keys.json"
    activity_keys_path: str = "activity_keys.json"

    # Network status
    strata_rpc_url: str = "http://localhost:8545"
    bundler_url: str = "http://localhost:8080/health"
    status_refetch_interval_s: int = Field(10, gt=0)
    rpc_max_retries: int = Field(3, ge=0)
    rpc_total_retry_time_s: float = Field(30.0, gt=0)

    # Paymaster wallets (balances read from the execution client)
    reth_url: str = "http://localhost:8545"
    deposit_paymaster_wallet: str = "0x0000000000000000000000000000000000000000"
    validating_paymaster_wallet: str = "0x0000000000000000000000000000000000000000"
    balances_refetch_interval_s: int = Field(10, gt=0)

    # Bridge
    strata_bridge_rpc_url: str = "http://localhost:8546"
    bridge_status_refetch_interval_s: int = Field(120, gt=0)
    bridge_operator_ping_timeout_s: float = Field(10.0, gt=0)

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_allow_origins: list[str] = ["*"]

    otel_service_name: str = "netmonitor"


settings = Settings()
