from typing import Literal, Any

# type aliases for clarity
Bech32Address = str
BigNumber = str
Timestamp = int
ElasticResponse = dict[Literal["hits"], Any]
ProxyResponse = dict[Literal["data", "error", "code"], Any]
