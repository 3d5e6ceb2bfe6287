"""配置管理模块 - 处理omd的配置文件、环境变量和凭证"""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w
from dotenv import load_dotenv

from omd.core.exceptions import ConfigurationError
from omd.core.logging import logger

DEFAULT_CONFIG_PATH = Path.home() / ".omd" / "config.toml"

# 环境变量 -> 配置字段 (环境变量优先于配置文件)
CREDENTIAL_ENV_VARS: dict[str, str] = {
    "FRED_API_KEY": "fred_api_key",
    "COINGECKO_API_KEY": "coingecko_api_key",
    "FINNHUB_API_KEY": "finnhub_api_key",
    "ALPHA_VANTAGE_API_KEY": "alpha_vantage_api_key",
    "EDGAR_USER_AGENT": "edgar_user_agent",
}


@dataclass
class CacheConfig:
    """缓存配置"""

    enabled: bool = True
    max_entries: int = 500


@dataclass
class ProviderConfig:
    """提供商配置"""

    timeout: float = 30.0


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "WARNING"
    file: str | None = None


@dataclass
class OmdConfig:
    """omd主配置"""

    fred_api_key: str | None = None
    coingecko_api_key: str | None = None
    finnhub_api_key: str | None = None
    alpha_vantage_api_key: str | None = None
    edgar_user_agent: str | None = None
    default_format: str = "table"
    disabled_sources: list[str] = field(default_factory=list)
    cache: CacheConfig = field(default_factory=CacheConfig)
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> OmdConfig:
        """从字典创建配置"""
        known = {f.name for f in fields(cls)} - {"cache", "providers", "logging"}
        unknown = set(config_dict) - known - {"cache", "providers", "logging"}
        if unknown:
            logger.warning("Ignoring unknown configuration keys: {}", sorted(unknown))

        top_level = {key: value for key, value in config_dict.items() if key in known}
        if "disabled_sources" in top_level:
            top_level["disabled_sources"] = _as_list(top_level["disabled_sources"])

        try:
            return cls(
                cache=CacheConfig(**config_dict.get("cache", {})),
                providers=ProviderConfig(**config_dict.get("providers", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
                **top_level,
            )
        except TypeError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """转换为字典，省略未设置的值"""
        return _drop_none(asdict(self))

    def get_api_key(self, field_name: str) -> str | None:
        value = getattr(self, field_name, None)
        return value or None

    def is_source_disabled(self, name: str) -> bool:
        return name in self.disabled_sources


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None, load_env: bool = True):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用 ``OMD_CONFIG_PATH`` 或默认路径
            load_env: 是否读取 ``.env`` 文件和环境变量
        """
        env_path = os.getenv("OMD_CONFIG_PATH")
        self.config_path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        self.load_env = load_env
        if load_env:
            load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
        self.config = self._load_config()

    def _read_file(self) -> dict[str, Any]:
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Failed to load config from {}: {}", self.config_path, e)
            return {}

    def _load_config(self) -> OmdConfig:
        """加载配置: 文件 < 环境变量"""
        config_dict = self._read_file()
        if self.load_env:
            deep_update(config_dict, load_config_from_env())
        return OmdConfig.from_dict(config_dict)

    def get_config(self) -> OmdConfig:
        """获取当前配置"""
        return self.config

    def reload(self) -> OmdConfig:
        self.config = self._load_config()
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置"""
        config_dict = self.config.to_dict()
        deep_update(config_dict, updates)
        self.config = OmdConfig.from_dict(config_dict)

    def set_value(self, key: str, value: str) -> None:
        """Set a single key from its string form, e.g. ``cache.max_entries``."""
        section, _, name = key.rpartition(".")
        if section:
            section_config = getattr(self.config, section, None)
            if section_config is None or not hasattr(section_config, "__dataclass_fields__"):
                raise ConfigurationError(f"Unknown configuration section: {section}", config_key=key)
            current = getattr(section_config, name, _MISSING)
            if current is _MISSING:
                raise ConfigurationError(f"Unknown configuration key: {key}", config_key=key)
            self.update_config(**{section: {name: _coerce(key, value, current)}})
            return

        if key in {"cache", "providers", "logging"} or key not in OmdConfig.__dataclass_fields__:
            raise ConfigurationError(f"Unknown configuration key: {key}", config_key=key)
        if key == "disabled_sources":
            self.update_config(disabled_sources=_as_list(value))
        else:
            self.update_config(**{key: value})

    def save_config(self) -> None:
        """保存配置到文件"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "wb") as f:
            tomli_w.dump(self.config.to_dict(), f)
        os.chmod(self.config_path, 0o600)
        logger.info("Saved configuration to {}", self.config_path)


_MISSING = object()


def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    """深度更新字典"""
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = deep_update(dict(d.get(k) or {}), v)
        else:
            d[k] = v
    return d


def _drop_none(value: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, item in value.items():
        if item is None:
            continue
        cleaned[key] = _drop_none(item) if isinstance(item, dict) else item
    return cleaned


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part) for part in value]


def _coerce(key: str, raw: str, current: Any) -> Any:
    if isinstance(current, bool):
        return raw.lower() in {"1", "true", "yes", "on"}
    try:
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {key}: {raw!r}", config_key=key) from exc
    return raw


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    for env_var, field_name in CREDENTIAL_ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            config[field_name] = value

    disabled = os.getenv("OMD_DISABLED_SOURCES")
    if disabled is not None:
        config["disabled_sources"] = _as_list(disabled)

    # 缓存配置
    cache_config: dict[str, Any] = {}
    omd_cache_enabled = os.getenv("OMD_CACHE_ENABLED")
    if omd_cache_enabled is not None:
        cache_config["enabled"] = omd_cache_enabled.lower() == "true"
    omd_cache_max_entries = os.getenv("OMD_CACHE_MAX_ENTRIES")
    if omd_cache_max_entries is not None:
        cache_config["max_entries"] = int(omd_cache_max_entries)
    if cache_config:
        config["cache"] = cache_config

    # 提供商配置
    omd_provider_timeout = os.getenv("OMD_PROVIDER_TIMEOUT")
    if omd_provider_timeout is not None:
        config["providers"] = {"timeout": float(omd_provider_timeout)}

    # 日志配置
    omd_logging_level = os.getenv("OMD_LOGGING_LEVEL")
    if omd_logging_level is not None:
        config["logging"] = {"level": omd_logging_level}

    return config


def get_default_config() -> OmdConfig:
    """获取默认配置"""
    return OmdConfig()
