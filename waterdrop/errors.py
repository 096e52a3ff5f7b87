class DataSourceError(Exception):
    """Raise if the indexer or the proxy fails to return usable data"""

    pass


class NumericParseError(Exception):
    """Raise if an amount or hex argument cannot be parsed as an integer"""

    pass


class TokenNotFound(DataSourceError):
    """Raise if the ESDT system contract does not know the token"""

    pass


class InvalidDecimals(DataSourceError):
    pass


class InsufficientFunds(Exception):
    """Raise if the bonus wallet cannot cover the distribution"""

    pass


class TooManyLoopsError(Exception):
    """Raise if a loop runs too many times"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
