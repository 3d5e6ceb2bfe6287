"""Standard error codes shared across omd."""

from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # 路由相关错误
    SOURCE_NOT_AVAILABLE = "SOURCE_NOT_AVAILABLE"
    NO_PROVIDERS_AVAILABLE = "NO_PROVIDERS_AVAILABLE"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"

    # 提供商相关错误
    PROVIDER_ERROR = "PROVIDER_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    DATA_NOT_FOUND = "DATA_NOT_FOUND"
    UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"
    INVALID_REQUEST = "INVALID_REQUEST"


__all__ = ["ErrorCode"]
