"""omd核心异常类."""

from __future__ import annotations

from typing import Any

from omd.core.exceptions.codes import ErrorCode
from omd.core.models.enums import FailureKind


class OmdError(Exception):
    """omd基础异常类."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 额外详情
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        payload: dict[str, Any] = {"code": self.error_code.value, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class ConfigurationError(OmdError):
    """配置异常."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if config_key:
            super_details["config_key"] = config_key
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, super_details)
        self.config_key = config_key


class SourceNotAvailableError(OmdError):
    """指定的数据源不可用."""

    def __init__(self, source: str, category: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details.update({"source": source, "category": category})
        super().__init__(
            f'Source "{source}" not available for category "{category}"',
            ErrorCode.SOURCE_NOT_AVAILABLE,
            super_details,
        )
        self.source = source
        self.category = category


class NoProvidersAvailableError(OmdError):
    """没有可用提供商异常."""

    def __init__(
        self,
        category: str,
        unavailable: list[dict[str, str]] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["category"] = category
        message = f'No providers available for category "{category}"'
        if unavailable:
            super_details["unavailable"] = unavailable
            reasons = "; ".join(f"{item['provider']} ({item['reason']})" for item in unavailable)
            message = f"{message}: {reasons}"
        super().__init__(message, ErrorCode.NO_PROVIDERS_AVAILABLE, super_details)
        self.category = category
        self.unavailable = unavailable or []


class AllProvidersFailedError(OmdError):
    """所有提供商都失败异常."""

    def __init__(
        self,
        category: str,
        action: str,
        failures: list[dict[str, Any]],
        details: dict[str, Any] | None = None,
    ):
        sources = ", ".join(str(failure["provider"]) for failure in failures)
        last_message = failures[-1]["message"] if failures else None
        super_details = details or {}
        super_details.update({"category": category, "action": action, "failed_providers": failures})
        super().__init__(
            f"All providers failed for {category}/{action} (tried: {sources}): {last_message}",
            ErrorCode.ALL_PROVIDERS_FAILED,
            super_details,
        )
        self.failures = failures

    @property
    def attempted_sources(self) -> list[str]:
        return [str(failure["provider"]) for failure in self.failures]


class ProviderError(OmdError):
    """数据提供商执行失败.

    Raised inside provider adapters only; ``DataProvider.execute`` folds it
    into a :class:`~omd.core.models.provider.ProviderFailure`.
    """

    failure_kind: FailureKind = FailureKind.UPSTREAM

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["provider"] = provider_name
        super().__init__(message, error_code, super_details)
        self.provider_name = provider_name


class RateLimitError(ProviderError):
    """速率限制异常."""

    failure_kind = FailureKind.RATE_LIMITED

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.RATE_LIMIT_ERROR, details)


class AuthenticationError(ProviderError):
    """认证异常."""

    failure_kind = FailureKind.AUTHENTICATION

    def __init__(
        self,
        message: str,
        provider_name: str,
        key_env_var: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if key_env_var:
            super_details["key_env_var"] = key_env_var
        super().__init__(message, provider_name, ErrorCode.AUTHENTICATION_ERROR, super_details)


class NetworkError(ProviderError):
    """网络异常."""

    failure_kind = FailureKind.NETWORK

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.NETWORK_ERROR, details)


class UpstreamError(ProviderError):
    """上游API返回错误状态."""

    failure_kind = FailureKind.UPSTREAM

    def __init__(
        self,
        message: str,
        provider_name: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, provider_name, ErrorCode.UPSTREAM_ERROR, super_details)
        self.status_code = status_code


class DataNotFoundError(ProviderError):
    """请求的数据不存在."""

    failure_kind = FailureKind.NOT_FOUND

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.DATA_NOT_FOUND, details)


class UnsupportedActionError(ProviderError):
    """提供商不支持该操作."""

    failure_kind = FailureKind.UNSUPPORTED

    def __init__(self, provider_name: str, category: str, action: str):
        super().__init__(
            f"{provider_name} does not support {category}/{action}",
            provider_name,
            ErrorCode.UNSUPPORTED_ACTION,
            {"category": category, "action": action},
        )


class InvalidRequestError(ProviderError):
    """请求参数无效."""

    failure_kind = FailureKind.INVALID_REQUEST

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.INVALID_REQUEST, details)
