from copy import deepcopy
from typing import Any, Optional

import requests
from pydantic import ValidationError

from waterdrop.env import ENDPOINTS, REQUEST_TIMEOUT
from waterdrop.errors import DataSourceError
from waterdrop.models import ElasticResponse, EventRecord, ProxyResponse


def extract_nested(res: dict[str, Any], access_path: list[str]):
    """
    Walks through a dictionary until it finds the data you want.

    :param `res`: decoded json response
    :param `access_path`: in the format ['first_key', 'nested_key_level0', ....]
    """
    deepcopy_access_path = deepcopy(access_path)
    current = res
    while len(deepcopy_access_path) > 0:
        current = current[deepcopy_access_path.pop(0)]
    return current


def get_json(url: str, params: Optional[dict[str, Any]] = None) -> Any:
    try:
        response = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        raise DataSourceError(f"GET {url} failed: {e}") from e


def post_json(url: str, body: dict[str, Any]) -> Any:
    try:
        response = requests.post(url, json=body, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        raise DataSourceError(f"POST {url} failed: {e}") from e


def proxy_data(response: ProxyResponse, url: str) -> dict[str, Any]:
    """The proxy wraps every payload in {data, error, code}"""
    if not response:
        raise DataSourceError(f"Empty response from {url}")
    if response.get("error"):
        raise DataSourceError(f"Error from {url}: {response['error']}")
    data = response.get("data")
    if data is None:
        raise DataSourceError(f"No data in response from {url}")
    return data


def elastic_hits(response: ElasticResponse, url: str) -> list[EventRecord]:
    if not response:
        raise DataSourceError(f"Empty response from {url}")
    if "error" in response:
        raise DataSourceError(f"Error in search to {url}: {response['error']}")
    try:
        hits = extract_nested(response, ["hits", "hits"])
        return [EventRecord.from_hit(h) for h in hits]
    except (KeyError, TypeError, ValidationError) as e:
        raise DataSourceError(f"Malformed search response from {url}") from e


def elastic_search(index: str, size: int, query: str, sort: Optional[str] = None):
    """
    Lucene query string search against the indexer.
    :param `index`: eg `transactions` or `scresults`
    :param `query`: eg `receiver:erd1... AND timestamp:>=1600000000`
    """
    url = f"{ENDPOINTS.INDEXER}/{index}/_search"
    params: dict[str, Any] = {"size": size, "q": query}
    if sort is not None:
        params["sort"] = sort
    return elastic_hits(get_json(url, params), url)
