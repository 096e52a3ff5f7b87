import os
from typing import Optional

from dotenv import load_dotenv

from waterdrop.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str, default: Optional[str] = None) -> str:
    """
    Attempt to fetch an environment variable, fall back to `default`
    and throw an error if neither is set
    """
    var = os.environ.get(accessor, default)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


class ADDRESSES:
    # system smart contracts, identical on every MultiversX network
    ESDT_SYSTEM_SC = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqzllls8a5w6u"
    STAKING_REWARDS = "erd1qqqqqqqqqqqqqqqpqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqplllst77y4l"


class ENDPOINTS:
    PROXY = env_var("PROXY_URL", "https://gateway.multiversx.com").rstrip("/")
    INDEXER = env_var("INDEXER_URL", "https://index.multiversx.com").rstrip("/")


REQUEST_TIMEOUT = int(env_var("REQUEST_TIMEOUT", "60"))
