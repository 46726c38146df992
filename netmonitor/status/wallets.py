"""Paymaster wallet balances."""

from __future__ import annotations

import re

import httpx

from netmonitor.core.errors import DecodeError, TransportError
from netmonitor.core.logger import get_logger
from netmonitor.domain.models import PaymasterWallets, Wallet
from netmonitor.metrics import WALLET_BALANCE_WEI

from .poller import rpc_request
from .store import LatestValueStore

logger = get_logger("netmonitor.wallets")

GET_BALANCE_METHOD = "eth_getBalance"
_HEX_QUANTITY_RE = re.compile(r"0x[0-9a-fA-F]+")


def parse_hex_quantity(value: object) -> int | None:
    """`0x`-prefixed hex quantity as returned by eth_getBalance."""
    if not isinstance(value, str) or not _HEX_QUANTITY_RE.fullmatch(value):
        return None
    return int(value[2:], 16)


async def fetch_wallet_balance(
    client: httpx.AsyncClient, rpc_url: str, address: str
) -> str | None:
    """Balance in wei as a decimal string, or None if it could not be read."""
    try:
        result = await rpc_request(client, rpc_url, GET_BALANCE_METHOD, [address, "latest"])
    except (TransportError, DecodeError) as e:
        logger.warning(
            "wallet_balance_fetch_failed", extra={"address": address, "error": str(e)}
        )
        return None
    balance = parse_hex_quantity(result)
    if balance is None:
        logger.warning(
            "wallet_balance_invalid", extra={"address": address, "result": repr(result)}
        )
        return None
    return str(balance)


class WalletStore(LatestValueStore[PaymasterWallets]):
    def __init__(self, deposit_address: str, validating_address: str):
        super().__init__(
            PaymasterWallets(
                deposit=Wallet(address=deposit_address),
                validating=Wallet(address=validating_address),
            )
        )


class BalancePoller:
    def __init__(self, client: httpx.AsyncClient, store: WalletStore, rpc_url: str):
        self.client = client
        self.store = store
        self.rpc_url = rpc_url

    async def poll_once(self) -> PaymasterWallets:
        """Refresh both balances; a failed read reports "0"."""
        current = self.store.read()
        refreshed = {}
        for name, wallet in (("deposit", current.deposit), ("validating", current.validating)):
            balance = await fetch_wallet_balance(self.client, self.rpc_url, wallet.address)
            refreshed[name] = Wallet(address=wallet.address, balance=balance or "0")
            WALLET_BALANCE_WEI.labels(wallet=name).set(float(refreshed[name].balance))
        wallets = PaymasterWallets(**refreshed)
        self.store.replace(wallets)
        logger.debug("wallet_balances_updated", extra=wallets.model_dump())
        return wallets
