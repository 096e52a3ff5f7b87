"""
Everything we read from the chain itself goes through the gateway (proxy) REST API.
Amounts come back as integer strings in minor units.
"""

import base64
import binascii
from decimal import Decimal

from waterdrop.conversion import hex_encode_text, to_human_scale
from waterdrop.env import ADDRESSES, ENDPOINTS
from waterdrop.errors import (
    DataSourceError,
    InvalidDecimals,
    NumericParseError,
    TokenNotFound,
)
from waterdrop.models import Bech32Address, NetworkConfig, TokenDescriptor
from waterdrop.queries.common import get_json, post_json, proxy_data


def get_network_config() -> NetworkConfig:
    url = f"{ENDPOINTS.PROXY}/network/config"
    data = proxy_data(get_json(url), url)
    try:
        config = data["config"]
        return NetworkConfig(
            start_time=config["erd_start_time"],
            denomination=config.get("erd_denomination", 18),
        )
    except (KeyError, TypeError) as e:
        raise DataSourceError(f"Malformed network config from {url}") from e


def get_token_properties(ticker: str) -> TokenDescriptor:
    """
    Query `getTokenProperties` on the ESDT system contract.
    Return data is a list of base64 strings, the name first and `NumDecimals-<n>` sixth.
    """
    url = f"{ENDPOINTS.PROXY}/vm-values/query"
    body = {
        "scAddress": ADDRESSES.ESDT_SYSTEM_SC,
        "funcName": "getTokenProperties",
        "args": [hex_encode_text(ticker)],
    }
    data = proxy_data(post_json(url, body), url)
    return_data = (data.get("data") or {}).get("returnData") or []

    if len(return_data) < 6:
        raise TokenNotFound(f"Invalid getTokenProperties response for {ticker}")

    try:
        # the owner field is a raw public key, only decode what we read
        name, properties = (
            base64.b64decode(return_data[i] or "").decode("utf-8") for i in (0, 5)
        )
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TokenNotFound(f"Undecodable getTokenProperties response for {ticker}") from e
    decimals = properties.removeprefix("NumDecimals-")
    if not decimals.isdigit():
        raise InvalidDecimals(f"Invalid token decimals {properties!r} for {ticker}")

    return TokenDescriptor(
        ticker=ticker,
        short_ticker=TokenDescriptor.short(ticker),
        name=name,
        decimals=int(decimals),
    )


def get_egld_balance(address: Bech32Address, denomination: int = 18) -> Decimal:
    url = f"{ENDPOINTS.PROXY}/address/{address}"
    data = proxy_data(get_json(url), url)
    try:
        return to_human_scale(data["account"]["balance"], denomination)
    except (KeyError, TypeError, NumericParseError) as e:
        raise DataSourceError(f"Malformed account response from {url}") from e


def get_token_balance(address: Bech32Address, token: TokenDescriptor) -> Decimal:
    """An address that never held the token has a balance of 0"""
    url = f"{ENDPOINTS.PROXY}/address/{address}/esdt/{token.ticker}"
    data = proxy_data(get_json(url), url)
    try:
        balance = data["tokenData"]["balance"]
    except (KeyError, TypeError) as e:
        raise DataSourceError(f"Malformed token balance response from {url}") from e
    try:
        return to_human_scale(balance or "0", token.decimals)
    except NumericParseError as e:
        raise DataSourceError(f"Malformed token balance {balance!r} from {url}") from e
