"""Exception handling module."""

from omd.core.exceptions.base import (
    AllProvidersFailedError,
    AuthenticationError,
    ConfigurationError,
    DataNotFoundError,
    InvalidRequestError,
    NetworkError,
    NoProvidersAvailableError,
    OmdError,
    ProviderError,
    RateLimitError,
    SourceNotAvailableError,
    UnsupportedActionError,
    UpstreamError,
)
from omd.core.exceptions.codes import ErrorCode

__all__ = [
    "OmdError",
    "ErrorCode",
    "ConfigurationError",
    "SourceNotAvailableError",
    "NoProvidersAvailableError",
    "AllProvidersFailedError",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "NetworkError",
    "UpstreamError",
    "DataNotFoundError",
    "UnsupportedActionError",
    "InvalidRequestError",
]
