from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from waterdrop.models.types import Bech32Address, BigNumber


class BonusLedgerEntry(BaseModel):
    """
    Result of the allocation for a single delegator
    :param `average_stake`: sum of daily snapshots divided by the number of windows
    :param `current_balance`: stake after the last processed event
    :param `bonus`: whole bonus tokens owed, already floored
    :param `token_balance`: bonus token already held, filled in for reporting only
    """

    address: Bech32Address
    average_stake: Decimal
    current_balance: Decimal
    bonus: int
    token_balance: Optional[Decimal] = None

    class Config:
        json_encoders = {Decimal: str}

    def to_row(self) -> dict[str, str]:
        # floats are only used for display, amounts stay exact in json
        return {
            "Address": self.address,
            "Average Stake": f"{float(self.average_stake):.2f}",
            "Last Staked": f"{float(self.current_balance):.2f}",
            "Token Balance": ""
            if self.token_balance is None
            else f"{float(self.token_balance):.2f}",
            "Bonus": str(self.bonus),
        }


class BonusSummary(BaseModel):
    """Totals needed to check the bonus wallet before anything is sent"""

    token: str
    total_bonus: int
    recipients: int
    windows: int


class TransferPayload(BaseModel):
    """Unsigned ESDT transfer, ready for an external signer"""

    receiver: Bech32Address
    value: BigNumber = "0"
    gas_limit: int
    data: str
