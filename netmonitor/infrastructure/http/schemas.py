"""Wire schemas for the account-abstraction indexer pages.

Field quirks of the upstream payloads:
- identities live in a nested object: {"address": {"hash": "0x.."}}
- operation fees arrive as decimal strings
- creation_timestamp may be null or missing
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, StrictInt

from netmonitor.domain.models import U64_MAX, EntityRecord, OperationRecord


def _address_hash(value: Any) -> str:
    if isinstance(value, dict):
        hash_ = value.get("hash")
        if isinstance(hash_, str):
            return hash_
    raise ValueError("missing field address.hash")


def _u64_from_string(value: Any) -> int:
    if not isinstance(value, str):
        raise ValueError("expected a decimal string")
    digits = value[1:] if value.startswith("+") else value
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"invalid unsigned integer: {value!r}")
    number = int(digits)
    if number > U64_MAX:
        raise ValueError(f"value out of range for u64: {value!r}")
    return number


def _null_or_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise ValueError("expected a string or null")


Address = Annotated[str, BeforeValidator(_address_hash)]


class UserOpItem(BaseModel):
    sender: Address = Field(alias="address")
    gas_used: Annotated[int, BeforeValidator(_u64_from_string)] = Field(alias="fee")
    timestamp: str

    def to_record(self) -> OperationRecord:
        return OperationRecord(
            sender=self.sender, gas_used=self.gas_used, timestamp=self.timestamp
        )


class AccountItem(BaseModel):
    address: Address
    creation_timestamp: Annotated[str, BeforeValidator(_null_or_string)] = ""
    # a JSON number here, unlike the operation fee
    gas_used: StrictInt = Field(0, ge=0, le=U64_MAX)

    def to_record(self) -> EntityRecord:
        return EntityRecord(
            address=self.address,
            creation_timestamp=self.creation_timestamp,
            gas_used=self.gas_used,
        )
