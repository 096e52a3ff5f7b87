from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, validator

from waterdrop.errors import DataSourceError
from waterdrop.models.types import Bech32Address, BigNumber

SUCCESS = "success"


class EventKind(str, Enum):
    """
    :kind STAKE_INCREASE: `delegate` call, the value sent is added to the stake
    :kind STAKE_DECREASE: `unDelegate@<hex amount>` call
    :kind REWARD_COMPOUNDING: `reDelegateRewards` call, amount lives in a smart contract result
    :kind IRRELEVANT: failed transactions and every other call
    """

    STAKE_INCREASE = "stake-increase"
    STAKE_DECREASE = "stake-decrease"
    REWARD_COMPOUNDING = "reward-compounding"
    IRRELEVANT = "irrelevant"


class EventRecord(BaseModel):
    """
    One indexed transaction or smart contract result.
    The indexer stores `data` base64 encoded, we keep the decoded bytes.
    """

    hash: str
    sender: Bech32Address
    receiver: Bech32Address
    value: BigNumber = "0"
    data: bytes = b""
    status: str = ""
    timestamp: int

    class Config:
        allow_mutation = False

    @validator("value", pre=True)
    @classmethod
    def value_or_zero(cls, value: Optional[str]):
        return "0" if value in (None, "") else str(value)

    @property
    def payload(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS

    @staticmethod
    def decode_data(data: Optional[str]) -> bytes:
        if not data:
            return b""
        try:
            return base64.b64decode(data, validate=True)
        except binascii.Error as e:
            raise DataSourceError(f"Undecodable data field {data!r}") from e

    @staticmethod
    def from_hit(hit: dict[str, Any]) -> EventRecord:
        source = hit["_source"]
        return EventRecord(
            hash=hit["_id"],
            sender=source["sender"],
            receiver=source["receiver"],
            value=source.get("value"),
            data=EventRecord.decode_data(source.get("data")),
            status=source.get("status") or "",
            timestamp=source["timestamp"],
        )


# smart contract results share the transaction document layout
SmartContractResult = EventRecord


class Window(NamedTuple):
    index: int
    start: int
    end: int
    priming: bool = False
