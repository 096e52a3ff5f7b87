from pydantic import BaseModel, validator


class TokenDescriptor(BaseModel):
    """
    ESDT metadata as reported by the ESDT system contract.
    Fetched once per run; every conversion of a bonus amount needs `decimals`.
    """

    ticker: str
    short_ticker: str
    name: str
    decimals: int

    @validator("decimals")
    @classmethod
    def decimals_in_range(cls, decimals: int):
        if decimals < 0 or decimals > 18:
            raise ValueError(f"Unsupported decimals {decimals}")
        return decimals

    @staticmethod
    def short(ticker: str) -> str:
        return ticker.split("-")[0]


class NetworkConfig(BaseModel):
    """Subset of the proxy's `network/config` we rely on"""

    start_time: int
    denomination: int = 18
