import json
import os
from dataclasses import dataclass
from decimal import getcontext
from pathlib import Path
from typing import Any, Optional

import pytest

from waterdrop.config import create_conf
from waterdrop.models import Config, EventRecord, TokenDescriptor

getcontext().prec = 42

STUBS = Path(__file__).parent / "stubs"

STAKING_SC = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq8lllls0lczs7"
STAKING_REWARDS = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqplllst77y4l"
DAY = 24 * 60 * 60


@pytest.fixture
def config() -> Config:
    return create_conf(str(STUBS / "config" / "config.json"))


@pytest.fixture
def token() -> TokenDescriptor:
    return TokenDescriptor(
        ticker="WATER-9ed400", short_ticker="WATER", name="WaterDrop", decimals=18
    )


@pytest.fixture()
def ADDRESSES():
    return [
        "erd1qyu5wthldzr8wx5c9ucg8kjagg0jfs53s8nr3zpz3hypefsdd8ssycr6th",
        "erd1spyavw0956vq68xj8y4tenjpq2wd5a9p2c6j8gsz7ztyrnpxrruqzu66jx",
        "erd1k2s324ww2g0yj38qn2ch2jwctdy8mnfxep94q9arncc6xecg3xaq6mjse8",
        "erd1kyaqzaprcdnv4luvanah0gfxzzsnpaygsy6pytrexll2urtd05ts9vegu7",
    ]


@dataclass
class MockResponse:
    res: Any
    status_code: int = 200

    def json(self):
        return self.res

    def raise_for_status(self):
        pass


LIVE_CALLS_DISABLED = os.environ.get("PYTEST_LIVE_CALLS_ENABLED") != "TRUE"
SKIP_REASON = (
    "API Calls disabled: set PYTEST_LIVE_CALLS_ENABLED=TRUE in .env to run this test"
)


def load_stub(name: str) -> dict[str, Any]:
    with open(STUBS / name) as j:
        return json.load(j)


def make_event(
    sender: str,
    payload: str,
    value: str = "0",
    timestamp: int = 0,
    status: str = "success",
    hash: Optional[str] = None,
    receiver: str = STAKING_SC,
) -> EventRecord:
    return EventRecord(
        hash=hash or f"{sender[-6:]}-{timestamp}-{payload}",
        sender=sender,
        receiver=receiver,
        value=value,
        data=payload.encode(),
        status=status,
        timestamp=timestamp,
    )


def units(amount: int, decimals: int = 18) -> str:
    """Whole tokens as an integer string in minor units"""
    return str(amount * 10**decimals)
