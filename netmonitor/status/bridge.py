"""Bridge operator liveness and current deposits.

Operators and deposits are read from the chain client; each operator is then
pinged on the bridge RPC. Withdrawal and reimbursement tracking have no RPC
source yet and are served empty.
"""

from __future__ import annotations

import asyncio

import httpx

from netmonitor.core.errors import DecodeError, TransportError
from netmonitor.core.logger import get_logger
from netmonitor.domain.models import BridgeStatus, DepositInfo, OperatorStatus
from netmonitor.metrics import BRIDGE_OPERATORS_ONLINE

from .poller import rpc_request
from .store import LatestValueStore

logger = get_logger("netmonitor.bridge")

OPERATOR_SET_METHOD = "strata_getActiveOperatorChainPubkeySet"
OPERATOR_STATUS_METHOD = "stratabridge_operatorStatus"
CURRENT_DEPOSITS_METHOD = "strata_getCurrentDeposits"
DEPOSIT_BY_ID_METHOD = "strata_getCurrentDepositById"

ONLINE = "Online"
OFFLINE = "Offline"
UNKNOWN_DEPOSIT_STATE = "-"


async def get_bridge_operators(client: httpx.AsyncClient, rpc_url: str) -> dict[int, str]:
    """Operator index -> public key, ordered by index."""
    result = await rpc_request(client, rpc_url, OPERATOR_SET_METHOD)
    if not isinstance(result, dict):
        raise DecodeError(f"{OPERATOR_SET_METHOD} result is not an object")
    operators = {}
    for index, public_key in result.items():
        try:
            operators[int(index)] = str(public_key)
        except ValueError as e:
            raise DecodeError(f"Invalid operator index {index!r}") from e
    return dict(sorted(operators.items()))


async def get_operator_status(
    client: httpx.AsyncClient, bridge_rpc_url: str, index: int, timeout_s: float
) -> str:
    """Online only when the operator answers `true` within timeout_s."""
    try:
        answer = await asyncio.wait_for(
            rpc_request(client, bridge_rpc_url, OPERATOR_STATUS_METHOD, [index]),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        logger.warning("operator_ping_timeout", extra={"operator": index})
        return OFFLINE
    except (TransportError, DecodeError) as e:
        logger.warning("operator_ping_failed", extra={"operator": index, "error": str(e)})
        return OFFLINE
    return ONLINE if answer is True else OFFLINE


async def get_current_deposits(client: httpx.AsyncClient, rpc_url: str) -> list[int]:
    result = await rpc_request(client, rpc_url, CURRENT_DEPOSITS_METHOD)
    if not isinstance(result, list) or not all(
        isinstance(i, int) and not isinstance(i, bool) for i in result
    ):
        raise DecodeError(f"{CURRENT_DEPOSITS_METHOD} result is not a list of ids")
    return result


def deposit_state(raw: object) -> str:
    """Deposit state name, capitalised.

    The state is either a bare string or an object keyed by the state name.
    """
    if isinstance(raw, str):
        name = raw
    elif isinstance(raw, dict) and raw:
        name = next(iter(raw))
    else:
        return UNKNOWN_DEPOSIT_STATE
    return name[:1].upper() + name[1:]


async def get_deposit_info(
    client: httpx.AsyncClient, rpc_url: str, deposit_id: int
) -> DepositInfo | None:
    try:
        entry = await rpc_request(client, rpc_url, DEPOSIT_BY_ID_METHOD, [deposit_id])
    except (TransportError, DecodeError) as e:
        logger.warning("deposit_fetch_failed", extra={"deposit_id": deposit_id, "error": str(e)})
        return None
    if not isinstance(entry, dict) or not isinstance(entry.get("output"), str):
        logger.warning("deposit_entry_invalid", extra={"deposit_id": deposit_id})
        return None
    # output is an outpoint, "<txid>:<vout>"
    txid = entry["output"].split(":", 1)[0]
    return DepositInfo(
        deposit_request_txid=txid,
        deposit_txid=None,
        status=deposit_state(entry.get("state")),
    )


class BridgeStore(LatestValueStore[BridgeStatus]):
    def __init__(self):
        super().__init__(BridgeStatus())


class BridgeMonitor:
    def __init__(
        self,
        client: httpx.AsyncClient,
        store: BridgeStore,
        rpc_url: str,
        bridge_rpc_url: str,
        ping_timeout_s: float,
    ):
        self.client = client
        self.store = store
        self.rpc_url = rpc_url
        self.bridge_rpc_url = bridge_rpc_url
        self.ping_timeout_s = ping_timeout_s

    async def poll_once(self) -> BridgeStatus:
        """Rebuild the bridge status.

        A section whose chain query fails keeps its previous value.
        """
        previous = self.store.read()
        operators = previous.operators
        deposits = previous.deposits

        try:
            operator_keys = await get_bridge_operators(self.client, self.rpc_url)
        except (TransportError, DecodeError) as e:
            logger.error("bridge_operators_fetch_failed", extra={"error": str(e)})
        else:
            operators = [
                OperatorStatus(
                    operator_id=f"Operator #{index}",
                    operator_address=public_key,
                    status=await get_operator_status(
                        self.client, self.bridge_rpc_url, index, self.ping_timeout_s
                    ),
                )
                for index, public_key in operator_keys.items()
            ]
            BRIDGE_OPERATORS_ONLINE.set(sum(op.status == ONLINE for op in operators))

        try:
            deposit_ids = await get_current_deposits(self.client, self.rpc_url)
        except (TransportError, DecodeError) as e:
            logger.error("bridge_deposits_fetch_failed", extra={"error": str(e)})
        else:
            deposits = []
            for deposit_id in deposit_ids:
                info = await get_deposit_info(self.client, self.rpc_url, deposit_id)
                if info is not None:
                    deposits.append(info)

        status = BridgeStatus(operators=operators, deposits=deposits)
        self.store.replace(status)
        logger.info(
            "bridge_status_updated",
            extra={"operators": len(operators), "deposits": len(deposits)},
        )
        return status
