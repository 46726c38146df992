from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .windows import StatsKeys

U64_MAX = 2**64 - 1


class OperationRecord(BaseModel):
    """One user operation from the operations source."""

    sender: str
    gas_used: int = Field(ge=0, le=U64_MAX)
    timestamp: str


class EntityRecord(BaseModel):
    """An account as served in selections.

    creation_timestamp is an empty string when the source had none.
    """

    address: str
    creation_timestamp: str = ""
    gas_used: int = Field(0, ge=0, le=U64_MAX)


class StatsSnapshot(BaseModel):
    """Latest aggregate statistics served to readers.

    stats: stat label -> window label -> value
    selected_accounts: selection label -> up to five accounts
    """

    stats: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    selected_accounts: Dict[str, List[EntityRecord]] = Field(default_factory=dict)

    @classmethod
    def zero(cls, keys: StatsKeys) -> "StatsSnapshot":
        return cls(
            stats={
                stat_label: {window_label: 0 for window_label in keys.time_windows.labels()}
                for stat_label in keys.stat_names.labels()
            },
            selected_accounts={
                label: [] for label in keys.select_accounts_by.labels()
            },
        )


class CycleOutcome(str, Enum):
    REFRESHED = "refreshed"
    PARTIAL = "partial"
    FAILED = "failed"


class CycleResult(BaseModel):
    """What one refresh cycle managed to do."""

    outcome: CycleOutcome
    failed_sources: List[str] = Field(default_factory=list)
    pages_fetched: Dict[str, int] = Field(default_factory=dict)
    started_at: datetime
    finished_at: datetime


class Status(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class NetworkStatus(BaseModel):
    batch_producer: Status = Status.OFFLINE
    rpc_endpoint: Status = Status.OFFLINE
    bundler_endpoint: Status = Status.OFFLINE


class Wallet(BaseModel):
    address: str
    # decimal wei; "0" until the first successful fetch
    balance: str = "0"


class PaymasterWallets(BaseModel):
    deposit: Wallet
    validating: Wallet


class BalancesResponse(BaseModel):
    wallets: PaymasterWallets


class OperatorStatus(BaseModel):
    operator_id: str
    operator_address: str
    status: str


class DepositInfo(BaseModel):
    deposit_request_txid: str
    deposit_txid: Optional[str] = None
    status: str


class WithdrawalInfo(BaseModel):
    withdrawal_request_txid: str
    fulfillment_txid: Optional[str] = None
    status: str


class ReimbursementInfo(BaseModel):
    claim_txid: str
    challenge_step: str
    payout_txid: Optional[str] = None
    status: str


class BridgeStatus(BaseModel):
    """Bridge operators and in-flight deposits, withdrawals, reimbursements."""

    operators: List[OperatorStatus] = Field(default_factory=list)
    deposits: List[DepositInfo] = Field(default_factory=list)
    withdrawals: List[WithdrawalInfo] = Field(default_factory=list)
    reimbursements: List[ReimbursementInfo] = Field(default_factory=list)
