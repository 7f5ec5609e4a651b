"""設定管理モジュール"""

from preekbot.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from preekbot.config.models import (
    BrokerConfig,
    Config,
    ContentServiceConfig,
    DatabaseConfig,
    DistributionConfig,
    HttpConfig,
    LLMConfig,
    LoggingConfig,
    SignalConfig,
)

__all__ = [
    "BrokerConfig",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "ContentServiceConfig",
    "DatabaseConfig",
    "DistributionConfig",
    "EnvironmentVariableError",
    "HttpConfig",
    "LLMConfig",
    "LoggingConfig",
    "SignalConfig",
    "expand_env_vars",
    "load_config",
]
