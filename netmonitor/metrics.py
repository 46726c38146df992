from shared.metrics import get_counter, get_gauge, get_histogram

SERVICE = "netmonitor"

# Paginated sources
PAGES_FETCHED_TOTAL = get_counter(
    "pages_fetched_total",
    "Pages successfully fetched from an upstream paginated source.",
    SERVICE,
    labelnames=("source",),
)
PAGE_FETCH_ERRORS_TOTAL = get_counter(
    "page_fetch_errors_total",
    "Page fetches that failed, by source and error kind.",
    SERVICE,
    labelnames=("source", "kind"),
)
RECORDS_SKIPPED_TOTAL = get_counter(
    "records_skipped_total",
    "Records ignored during aggregation or ranking.",
    SERVICE,
    labelnames=("reason",),
)

# Refresh cycles
CYCLES_TOTAL = get_counter(
    "stats_cycles_total",
    "Completed stats refresh cycles by outcome.",
    SERVICE,
    labelnames=("family", "outcome"),
)
CYCLE_DURATION_SECONDS = get_histogram(
    "stats_cycle_duration_seconds",
    "Wall time of one stats refresh cycle.",
    SERVICE,
    labelnames=("family",),
    buckets=[0.5, 1, 2.5, 5, 10, 30, 60, 120, 300],
)

# Network status
COMPONENT_ONLINE = get_gauge(
    "component_online",
    "1 when the monitored component reported online on the last check.",
    SERVICE,
    labelnames=("component",),
)
WALLET_BALANCE_WEI = get_gauge(
    "wallet_balance_wei",
    "Last fetched paymaster wallet balance in wei.",
    SERVICE,
    labelnames=("wallet",),
)
BRIDGE_OPERATORS_ONLINE = get_gauge(
    "bridge_operators_online",
    "Bridge operators that answered the last status ping.",
    SERVICE,
)
