from decimal import Decimal
from typing import Callable, NamedTuple

from waterdrop.conversion import parse_hex_int, to_human_scale
from waterdrop.env import ADDRESSES
from waterdrop.errors import NumericParseError
from waterdrop.models import Bech32Address, EventKind, EventRecord, SmartContractResult
from waterdrop.queries import get_tx_scrs

DELEGATE = "delegate"
UNDELEGATE_PREFIX = "unDelegate@"
REDELEGATE_REWARDS = "reDelegateRewards"

FetchResults = Callable[[str], list[SmartContractResult]]


class Classification(NamedTuple):
    kind: EventKind
    delta: Decimal


IRRELEVANT = Classification(EventKind.IRRELEVANT, Decimal(0))


def compounded_value(
    event: EventRecord, staking_sc: Bech32Address, fetch_results: FetchResults
) -> str:
    """
    The `reDelegateRewards` call carries no value. The staking contract forwards
    the rewards to the system staking contract in a smart contract result, and
    that value is what was added to the delegation.
    """
    value = "0"
    for scr in fetch_results(event.hash):
        if scr.receiver != ADDRESSES.STAKING_REWARDS or scr.sender != staking_sc:
            continue
        value = scr.value
    return value


def _delta(
    event: EventRecord, kind: EventKind, amount: Callable[[], Decimal], strict: bool
) -> Classification:
    try:
        return Classification(kind, amount())
    except NumericParseError as e:
        if strict:
            raise
        print(f"⚠️  Counting tx {event.hash} as zero: {e}")
        return Classification(kind, Decimal(0))


def classify_event(
    event: EventRecord,
    staking_sc: Bech32Address,
    decimals: int,
    fetch_results: FetchResults = get_tx_scrs,
    strict: bool = True,
) -> Classification:
    """
    Work out how a transaction to the staking contract changed the sender's stake.

    :param `event`: transaction sent to the staking contract
    :param `staking_sc`: the staking contract, used to match reward results
    :param `decimals`: denomination of the staked token
    :param `fetch_results`: looks up smart contract results for a tx hash
    :param `strict`: raise on malformed amounts rather than counting them as zero
    """
    if not event.succeeded:
        return IRRELEVANT

    payload = event.payload

    if payload == DELEGATE:
        return _delta(
            event,
            EventKind.STAKE_INCREASE,
            lambda: to_human_scale(event.value, decimals),
            strict,
        )

    if payload.startswith(UNDELEGATE_PREFIX):
        hex_amount = payload[len(UNDELEGATE_PREFIX) :]
        return _delta(
            event,
            EventKind.STAKE_DECREASE,
            lambda: -to_human_scale(str(parse_hex_int(hex_amount)), decimals),
            strict,
        )

    if payload == REDELEGATE_REWARDS:
        value = compounded_value(event, staking_sc, fetch_results)
        return _delta(
            event,
            EventKind.REWARD_COMPOUNDING,
            lambda: to_human_scale(value, decimals),
            strict,
        )

    return IRRELEVANT
