from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from typing import Callable, Iterable, Iterator, Optional

from waterdrop.models import (
    Bech32Address,
    Config,
    EventKind,
    EventRecord,
    NetworkConfig,
    Window,
)
from waterdrop.queries import fetch_window_events, get_indexed_txs, get_tx_scrs
from waterdrop.rewards.classifier import Classification, classify_event

DAY_SECONDS = 24 * 60 * 60

Balances = dict[Bech32Address, Decimal]
Classify = Callable[[EventRecord], Classification]
FetchWindow = Callable[[Window], list[EventRecord]]


@dataclass(frozen=True)
class DelegationState:
    """
    Running position of every delegator.

    :param `balances`: stake after the last applied event
    :param `sums`: one snapshot of the balance added per window, divided by `windows` to average
    :param `windows`: number of windows applied so far, priming window included
    """

    balances: Balances = field(default_factory=dict)
    sums: Balances = field(default_factory=dict)
    windows: int = 0


def apply_window(
    state: DelegationState, deltas: Iterable[tuple[Bech32Address, Decimal]]
) -> DelegationState:
    """
    Apply one window of stake changes, in order, then snapshot every known balance.
    Accounts with no events in the window carry their balance forward.
    Returns a new state, the one passed in is left untouched.
    """
    balances = dict(state.balances)
    for account, delta in deltas:
        balances[account] = balances.get(account, Decimal(0)) + delta

    sums = dict(state.sums)
    for account, balance in balances.items():
        sums[account] = sums.get(account, Decimal(0)) + balance

    return DelegationState(balances=balances, sums=sums, windows=state.windows + 1)


def iter_windows(
    first_start: int, range_start: int, range_end: int, length: int = DAY_SECONDS
) -> Iterator[Window]:
    """
    Yield the windows to replay, oldest first.

    The first window runs from `first_start` to the end of the first day of the range.
    When `first_start` is earlier than `range_start` (genesis) it primes every balance
    with the full history and is flagged as priming. It still counts towards the average.
    Later windows are `length` long and start while the cursor is <= `range_end`.
    """
    first_end = range_start + length
    yield Window(0, first_start, first_end, priming=first_start < range_start)

    index = 1
    cursor = first_end
    while cursor <= range_end:
        yield Window(index, cursor, cursor + length)
        index += 1
        cursor += length


def _fmt(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def replay(
    windows: Iterable[Window],
    fetch_window: FetchWindow,
    classify: Classify,
    state: Optional[DelegationState] = None,
) -> DelegationState:
    """
    Fetch, classify and apply each window in turn.
    Any error from the data sources aborts the whole replay.
    """
    state = state or DelegationState()
    for window in windows:
        print(f"⏳ Analyzing txs between {_fmt(window.start)} and {_fmt(window.end)}")
        events = fetch_window(window)
        print(f"   {len(events)} txs")
        deltas = []
        for event in events:
            classification = classify(event)
            if classification.kind != EventKind.IRRELEVANT:
                deltas.append((event.sender, classification.delta))
        state = apply_window(state, deltas)
    return state


def aggregate(
    conf: Config,
    network: NetworkConfig,
    fetch_events=get_indexed_txs,
    fetch_results=get_tx_scrs,
) -> DelegationState:
    """
    Replay the staking contract's history over the configured range.
    Depending on `conf.prime_from_genesis` the first window starts at network genesis
    or at `conf.start_time`.
    """
    first_start = (
        min(network.start_time, conf.start_time)
        if conf.prime_from_genesis
        else conf.start_time
    )
    windows = iter_windows(first_start, conf.start_time, conf.end_time)

    fetch_window = partial(
        _fetch_window, conf.staking_sc, conf.page_size, fetch_events
    )
    classify = partial(
        classify_event,
        staking_sc=conf.staking_sc,
        decimals=network.denomination,
        fetch_results=fetch_results,
        strict=conf.strict_parsing,
    )
    return replay(windows, fetch_window, classify)


def _fetch_window(staking_sc, page_size, fetch_events, window: Window):
    return fetch_window_events(staking_sc, window, page_size=page_size, fetch=fetch_events)
