from typing import Callable, Optional

from waterdrop.errors import TooManyLoopsError
from waterdrop.models import Bech32Address, EventRecord, SmartContractResult, Window
from waterdrop.queries.common import elastic_search

MAX_PAGE_SIZE = 10_000
MAX_SCRS = 10

FetchEvents = Callable[..., list[EventRecord]]


def get_indexed_txs(
    receiver: Bech32Address,
    from_time: int,
    to_time: int,
    size: int = MAX_PAGE_SIZE,
    sender: Optional[Bech32Address] = None,
) -> list[EventRecord]:
    """
    Transactions sent to `receiver` with `from_time <= timestamp < to_time`,
    oldest first, at most `size` of them.
    """
    query = f"receiver:{receiver}"
    if sender is not None:
        query += f" AND sender:{sender}"
    query += f" AND timestamp:>={from_time} AND timestamp:<{to_time}"
    return elastic_search("transactions", size, query, sort="timestamp:asc")


def get_tx_scrs(tx_hash: str, size: int = MAX_SCRS) -> list[SmartContractResult]:
    """Smart contract results generated by the transaction `tx_hash`"""
    return elastic_search("scresults", size, f"originalTxHash:{tx_hash}")


def fetch_window_events(
    receiver: Bech32Address,
    window: Window,
    page_size: int = MAX_PAGE_SIZE,
    fetch: FetchEvents = get_indexed_txs,
    sender: Optional[Bech32Address] = None,
    max_loops: int = 1000,
) -> list[EventRecord]:
    """
    Elasticsearch caps a search at 10k hits, so a window is fetched page by page.
    A full page means there may be more: we query again from one second after the
    last timestamp and stop at the first short page.

    Paging on the timestamp alone assumes no two events share the second that straddles
    a page boundary. Events tied with the last one of a full page are skipped.
    """
    events: list[EventRecord] = []
    from_time = window.start
    loops = 0
    while True:
        if loops > max_loops:
            raise TooManyLoopsError("fetch_window_events")
        page = fetch(receiver, from_time, window.end, page_size, sender)
        events += page
        if len(page) < page_size:
            return events
        from_time = page[-1].timestamp + 1
        loops += 1
