import pytest
from fakes import ACTIVITY_KEYS_DOC, NOW, USAGE_KEYS_DOC
from fastapi.testclient import TestClient

from netmonitor.domain.models import (
    BridgeStatus,
    CycleOutcome,
    CycleResult,
    DepositInfo,
    EntityRecord,
    NetworkStatus,
    OperatorStatus,
    Status,
)
from netmonitor.domain.windows import ACTIVITY, USAGE, StatsKeys
from netmonitor.main import app
from netmonitor.stats.store import SnapshotStore
from netmonitor.status.bridge import BridgeStore
from netmonitor.status.poller import StatusStore
from netmonitor.status.wallets import WalletStore


@pytest.fixture(scope="module", autouse=True)
def setup_app_state():
    # The lifespan is not entered by a bare TestClient; stores are wired by hand
    app.state.usage_store = SnapshotStore(StatsKeys.from_mapping(USAGE_KEYS_DOC, USAGE))
    app.state.activity_store = SnapshotStore(
        StatsKeys.from_mapping(ACTIVITY_KEYS_DOC, ACTIVITY)
    )
    app.state.status_store = StatusStore()
    app.state.wallet_store = WalletStore("0xd1", "0xf2")
    app.state.bridge_store = BridgeStore()
    yield


def test_usage_stats_zero_before_first_cycle():
    client = TestClient(app)
    resp = client.get("/api/usage_stats")
    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"]["User ops"] == {"24h": 0, "30d": 0, "YTD": 0}
    assert body["selected_accounts"] == {"Recent": [], "Top gas 24h": []}


@pytest.mark.asyncio
async def test_usage_stats_reflect_store_writes():
    store = app.state.usage_store
    async with store.writing() as writer:
        writer.merge_stats({"Gas used": {"24h": 100}})
        writer.set_selection(
            "Top gas 24h", [EntityRecord(address="0xAA", gas_used=100)]
        )

    body = TestClient(app).get("/api/usage_stats").json()
    assert body["stats"]["Gas used"]["24h"] == 100
    assert body["selected_accounts"]["Top gas 24h"] == [
        {"address": "0xAA", "creation_timestamp": "", "gas_used": 100}
    ]


def test_activity_stats_use_their_own_labels():
    body = TestClient(app).get("/api/activity_stats").json()
    assert set(body["stats"]) == {"Ops", "Gas", "Accounts"}


def test_network_status():
    client = TestClient(app)
    assert client.get("/api/status").json() == {
        "batch_producer": "offline",
        "rpc_endpoint": "offline",
        "bundler_endpoint": "offline",
    }

    app.state.status_store.replace(
        NetworkStatus(batch_producer=Status.ONLINE, rpc_endpoint=Status.ONLINE)
    )
    try:
        body = client.get("/api/status").json()
        assert body["rpc_endpoint"] == "online"
        assert body["bundler_endpoint"] == "offline"
    finally:
        app.state.status_store.replace(NetworkStatus())


def test_balances_before_first_poll():
    body = TestClient(app).get("/api/balances").json()
    assert body == {
        "wallets": {
            "deposit": {"address": "0xd1", "balance": "0"},
            "validating": {"address": "0xf2", "balance": "0"},
        }
    }


def test_bridge_status():
    client = TestClient(app)
    assert client.get("/api/bridge_status").json() == {
        "operators": [],
        "deposits": [],
        "withdrawals": [],
        "reimbursements": [],
    }

    app.state.bridge_store.replace(
        BridgeStatus(
            operators=[
                OperatorStatus(
                    operator_id="Operator #0", operator_address="02aa", status="Online"
                )
            ],
            deposits=[DepositInfo(deposit_request_txid="aa11", status="Fulfilled")],
        )
    )
    try:
        body = client.get("/api/bridge_status").json()
        assert body["operators"][0]["status"] == "Online"
        assert body["deposits"] == [
            {"deposit_request_txid": "aa11", "deposit_txid": None, "status": "Fulfilled"}
        ]
    finally:
        app.state.bridge_store.replace(BridgeStatus())


def test_healthz():
    resp = TestClient(app).get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_waits_for_both_families():
    client = TestClient(app)
    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["last_cycles"] == {"usage": None, "activity": None}

    result = CycleResult(outcome=CycleOutcome.PARTIAL, started_at=NOW, finished_at=NOW)
    app.state.usage_store.last_cycle = result
    app.state.activity_store.last_cycle = result
    try:
        resp = client.get("/readyz")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ready",
            "last_cycles": {"usage": "partial", "activity": "partial"},
        }
    finally:
        app.state.usage_store.last_cycle = None
        app.state.activity_store.last_cycle = None


def test_metrics_exposed():
    client = TestClient(app)
    client.get("/healthz")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "netmonitor_component_online" in resp.text
    assert "netmonitor_stats_cycle_duration_seconds" in resp.text


def test_cors_allows_browser_reads():
    resp = TestClient(app).get(
        "/api/usage_stats", headers={"Origin": "http://dashboard.test"}
    )
    assert resp.headers["access-control-allow-origin"] == "*"
