import re
from datetime import datetime, timezone

from pydantic import BaseModel, Field, validator

from waterdrop.errors import BadConfigException
from waterdrop.models.types import Bech32Address

BECH32_ADDRESS = re.compile(r"^erd1[02-9ac-hj-np-z]{58}$")
# ESDT identifiers are TICKER-<6 hex chars>
TOKEN_IDENTIFIER = re.compile(r"^[A-Z0-9]{3,10}-[0-9a-f]{6}$")

# multiversx mainnet went live on 2020-07-30
EARLIEST_TIMESTAMP = 1596117600


class InputConfig(BaseModel):
    """
    Config as written by the operator.

    :param `staking_sc`: delegation contract whose delegators receive the bonus
    :param `start_time`, `end_time`: unix timestamps bounding the averaging range
    :param `bonus_token`: ESDT identifier of the bonus, eg `WATER-9ed400`
    :param `bonus_amount`: bonus paid per `per_staked_amount` of average stake
    :param `bonus_wallet`: address the transfers will be signed from
    :param `prime_from_genesis`: replay all history before `start_time` to build balances
    :param `strict_parsing`: abort on malformed amounts instead of counting them as zero
    """

    staking_sc: Bech32Address = Field(alias="stakingSC")
    start_time: int = Field(alias="startTime")
    end_time: int = Field(alias="endTime")
    bonus_token: str = Field(alias="bonusToken")
    bonus_amount: int = Field(alias="bonusAmount")
    per_staked_amount: int = Field(alias="perStakedAmount")
    # the key file named by `bonusWallet` is left to the external signer
    bonus_wallet: Bech32Address = Field(alias="bonusWalletAddress")
    prime_from_genesis: bool = True
    strict_parsing: bool = True
    page_size: int = 10_000
    with_token_balances: bool = True

    class Config:
        # accept both our own snake_case and the camelCase of existing config.json files
        allow_population_by_field_name = True

    @validator("staking_sc", "bonus_wallet")
    @classmethod
    def validate_address(cls, address: str):
        if not BECH32_ADDRESS.match(address):
            raise BadConfigException(f"Not a valid erd1 address: {address}")
        return address

    @validator("start_time")
    @classmethod
    def validate_start(cls, start: int):
        if start < EARLIEST_TIMESTAMP:
            raise BadConfigException("Start time is before mainnet genesis")
        return start

    @validator("end_time")
    @classmethod
    def validate_end(cls, end: int, values):
        start = values.get("start_time")
        if start is not None and end <= start:
            raise BadConfigException("End time must be after start time")
        return end

    @validator("bonus_token")
    @classmethod
    def validate_token(cls, token: str):
        if not TOKEN_IDENTIFIER.match(token):
            raise BadConfigException(f"Not a valid token identifier: {token}")
        return token

    @validator("bonus_amount", "per_staked_amount")
    @classmethod
    def validate_positive(cls, amount: int):
        if amount <= 0:
            raise BadConfigException("Bonus amounts must be positive")
        return amount

    @validator("page_size")
    @classmethod
    def validate_page_size(cls, size: int):
        # elasticsearch refuses windows above 10k hits
        if size < 1 or size > 10_000:
            raise BadConfigException("Page size out of range")
        return size


class Config(InputConfig):
    # label of the run, used as the report folder name
    date: str

    @staticmethod
    def date_label(start_time: int, end_time: int) -> str:
        start = datetime.fromtimestamp(start_time, tz=timezone.utc)
        end = datetime.fromtimestamp(end_time, tz=timezone.utc)
        return f"{start:%Y-%m-%d}_{end:%Y-%m-%d}"
