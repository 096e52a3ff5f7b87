import math
from decimal import Decimal
from unittest.mock import Mock

import pytest

from waterdrop.errors import DataSourceError, TooManyLoopsError
from waterdrop.models import NetworkConfig, Window
from waterdrop.queries import fetch_window_events
from waterdrop.rewards import (
    DelegationState,
    aggregate,
    apply_window,
    iter_windows,
)
from waterdrop.test.conftest import DAY, STAKING_SC, make_event, units

GENESIS = 1596117600
START = 1672531200


class FakeIndexer:
    """Serves events by timestamp, honouring the from <= ts < to contract and the page size"""

    def __init__(self, events):
        self.events = sorted(events, key=lambda e: e.timestamp)
        self.calls = []

    def __call__(self, receiver, from_time, to_time, size, sender=None):
        self.calls.append((from_time, to_time, size))
        matching = [e for e in self.events if from_time <= e.timestamp < to_time]
        return matching[:size]


def test_apply_window_accumulates_and_carries_forward(ADDRESSES):
    a, b = ADDRESSES[:2]
    state = apply_window(DelegationState(), [(a, Decimal(100)), (b, Decimal(10))])
    state = apply_window(state, [(a, Decimal(-40))])
    state = apply_window(state, [])

    assert state.windows == 3
    assert state.balances == {a: Decimal(60), b: Decimal(10)}
    assert state.sums == {a: Decimal(220), b: Decimal(30)}


def test_apply_window_does_not_mutate_input(ADDRESSES):
    before = apply_window(DelegationState(), [(ADDRESSES[0], Decimal(1))])
    after = apply_window(before, [(ADDRESSES[0], Decimal(1))])

    assert before.balances[ADDRESSES[0]] == Decimal(1)
    assert before.windows == 1
    assert after.balances[ADDRESSES[0]] == Decimal(2)


def test_apply_window_keeps_negative_balances(ADDRESSES):
    state = apply_window(DelegationState(), [(ADDRESSES[0], Decimal(-5))])
    assert state.balances[ADDRESSES[0]] == Decimal(-5)
    assert state.sums[ADDRESSES[0]] == Decimal(-5)


def test_iter_windows_priming_window_covers_history():
    windows = list(iter_windows(GENESIS, START, START + 3 * DAY - 1))

    assert windows[0] == Window(0, GENESIS, START + DAY, priming=True)
    assert windows[1] == Window(1, START + DAY, START + 2 * DAY)
    assert windows[2] == Window(2, START + 2 * DAY, START + 3 * DAY)
    assert len(windows) == 3


def test_iter_windows_without_priming():
    windows = list(iter_windows(START, START, START + 3 * DAY - 1))
    assert windows[0] == Window(0, START, START + DAY, priming=False)
    assert len(windows) == 3


@pytest.mark.parametrize(
    "length", [1, DAY - 1, DAY, DAY + 1, 3 * DAY - 1, 3 * DAY, 10 * DAY + 7]
)
def test_iter_windows_count_and_contiguity(length):
    windows = list(iter_windows(GENESIS, START, START + length))

    # the priming window absorbs the first day of the range
    assert len(windows) == 1 + math.floor(length / DAY)
    assert [w.index for w in windows] == list(range(len(windows)))
    for prev, nxt in zip(windows, windows[1:]):
        assert prev.end == nxt.start
        assert nxt.end - nxt.start == DAY
    assert windows[-1].start <= START + length < windows[-1].end


def test_short_page_stops_paging(ADDRESSES):
    indexer = FakeIndexer(
        [make_event(ADDRESSES[0], "delegate", timestamp=START + i) for i in range(3)]
    )
    window = Window(0, START, START + DAY)

    events = fetch_window_events(STAKING_SC, window, page_size=5, fetch=indexer)

    assert len(events) == 3
    assert indexer.calls == [(START, START + DAY, 5)]


def test_full_page_fetches_again_after_last_timestamp(ADDRESSES):
    indexer = FakeIndexer(
        [make_event(ADDRESSES[0], "delegate", timestamp=START + i) for i in range(7)]
    )
    window = Window(0, START, START + DAY)

    events = fetch_window_events(STAKING_SC, window, page_size=5, fetch=indexer)

    assert [e.timestamp for e in events] == [START + i for i in range(7)]
    assert indexer.calls == [(START, START + DAY, 5), (START + 5, START + DAY, 5)]


def test_exact_multiple_of_page_size_needs_an_empty_page(ADDRESSES):
    indexer = FakeIndexer(
        [make_event(ADDRESSES[0], "delegate", timestamp=START + i) for i in range(4)]
    )
    window = Window(0, START, START + DAY)

    events = fetch_window_events(STAKING_SC, window, page_size=2, fetch=indexer)

    assert len(events) == 4
    assert len(indexer.calls) == 3
    assert indexer.calls[-1][0] == START + 4


def test_paging_drops_ties_on_page_boundary(ADDRESSES):
    # known limitation: pages are keyed on timestamp only
    indexer = FakeIndexer(
        [make_event(ADDRESSES[0], "delegate", timestamp=START, hash=f"{i}") for i in range(3)]
    )
    events = fetch_window_events(
        STAKING_SC, Window(0, START, START + DAY), page_size=2, fetch=indexer
    )
    assert len(events) == 2


def test_paging_gives_up_eventually(ADDRESSES):
    fetch = Mock(return_value=[make_event(ADDRESSES[0], "delegate", timestamp=START)])
    with pytest.raises(TooManyLoopsError):
        fetch_window_events(
            STAKING_SC, Window(0, START, START + DAY), page_size=1, fetch=fetch, max_loops=3
        )


def scenario_events(x):
    return [
        make_event(x, "delegate", value=units(100), timestamp=START + 10),
        make_event(x, "delegate", value=units(100), timestamp=START + DAY + 10),
        make_event(x, "unDelegate@" + format(50 * 10**18, "x"), timestamp=START + 2 * DAY + 10),
    ]


def test_aggregate_three_day_scenario(config, ADDRESSES):
    x = ADDRESSES[1]
    indexer = FakeIndexer(scenario_events(x))

    state = aggregate(config, NetworkConfig(start_time=GENESIS), fetch_events=indexer)

    assert state.windows == 3
    assert state.balances == {x: Decimal(150)}
    assert state.sums == {x: Decimal(450)}
    # the priming window starts at genesis
    assert indexer.calls[0][0] == GENESIS


def test_aggregate_primes_balances_from_history(config, ADDRESSES):
    x = ADDRESSES[1]
    history = [make_event(x, "delegate", value=units(30), timestamp=GENESIS + 5 * DAY)]
    indexer = FakeIndexer(history + scenario_events(x))

    state = aggregate(config, NetworkConfig(start_time=GENESIS), fetch_events=indexer)

    assert state.balances[x] == Decimal(180)
    assert state.sums[x] == Decimal(540)


def test_aggregate_without_priming_skips_history(config, ADDRESSES):
    x = ADDRESSES[1]
    history = [make_event(x, "delegate", value=units(30), timestamp=GENESIS + 5 * DAY)]
    indexer = FakeIndexer(history + scenario_events(x))
    config.prime_from_genesis = False

    state = aggregate(config, NetworkConfig(start_time=GENESIS), fetch_events=indexer)

    assert state.balances[x] == Decimal(150)
    assert indexer.calls[0][0] == config.start_time


def test_aggregate_ignores_irrelevant_events(config, ADDRESSES):
    indexer = FakeIndexer(
        [
            make_event(ADDRESSES[0], "claimRewards", timestamp=START + 1),
            make_event(ADDRESSES[1], "delegate", value=units(1), status="fail", timestamp=START + 2),
        ]
    )
    state = aggregate(config, NetworkConfig(start_time=GENESIS), fetch_events=indexer)

    assert state.balances == {}
    assert state.windows == 3


def test_aggregate_resolves_compounded_rewards(config, ADDRESSES):
    x = ADDRESSES[0]
    indexer = FakeIndexer([make_event(x, "reDelegateRewards", timestamp=START + 1, hash="h1")])
    results = [
        make_event(
            STAKING_SC,
            "stake",
            value=units(2),
            receiver="erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqplllst77y4l",
        )
    ]

    state = aggregate(
        config,
        NetworkConfig(start_time=GENESIS),
        fetch_events=indexer,
        fetch_results=lambda h: results,
    )

    assert state.balances == {x: Decimal(2)}


def test_aggregate_aborts_on_fetch_error(config):
    fetch = Mock(side_effect=DataSourceError("indexer down"))
    with pytest.raises(DataSourceError):
        aggregate(config, NetworkConfig(start_time=GENESIS), fetch_events=fetch)
