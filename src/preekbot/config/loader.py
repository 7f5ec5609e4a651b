"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

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


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

_NOTIFICATION_TRANSPORTS = ("signal", "broker")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する"""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _load_distribution(data: dict[str, Any] | None) -> DistributionConfig:
    """distribution セクションを読み込む（省略時はデフォルト値）"""
    if not data:
        return DistributionConfig()

    config = DistributionConfig(
        batch_size=int(data.get("batch_size", 10)),
        interval_seconds=float(data.get("interval_seconds", 5.0)),
        max_workers=int(data.get("max_workers", 1)),
        max_retries=int(data.get("max_retries", 3)),
        notification_transport=data.get("notification_transport", "signal"),
    )
    if config.batch_size < 1:
        raise ConfigValidationError("'distribution.batch_size' must be >= 1")
    if config.max_workers < 1:
        raise ConfigValidationError("'distribution.max_workers' must be >= 1")
    if config.notification_transport not in _NOTIFICATION_TRANSPORTS:
        raise ConfigValidationError(
            "'distribution.notification_transport' must be one of "
            f"{', '.join(_NOTIFICATION_TRANSPORTS)}"
        )
    return config


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # 必須セクションの検証
    llm_data = _validate_required_field(data, "llm")
    signal_data = _validate_required_field(data, "signal")
    content_data = _validate_required_field(data, "content_service")
    database_data = _validate_required_field(data, "database")

    llm = LLMConfig(
        model=_validate_required_field(llm_data, "model", "llm"),
        api_key=_validate_required_field(llm_data, "api_key", "llm"),
        api_base=llm_data.get("api_base", "https://api.openai.com/v1"),
        max_retries=int(llm_data.get("max_retries", 3)),
        retry_delay_seconds=float(llm_data.get("retry_delay_seconds", 1.0)),
        timeout_seconds=float(llm_data.get("timeout_seconds", 60.0)),
        max_tool_depth=int(llm_data.get("max_tool_depth", 5)),
    )

    signal = SignalConfig(
        service_url=_validate_required_field(signal_data, "service_url", "signal"),
        number=signal_data.get("number", "+31682016353"),
        timeout_seconds=float(signal_data.get("timeout_seconds", 10.0)),
        max_retries=int(signal_data.get("max_retries", 3)),
        retry_delay_seconds=float(signal_data.get("retry_delay_seconds", 1.0)),
    )

    content_service = ContentServiceConfig(
        url=_validate_required_field(content_data, "url", "content_service"),
        cache_ttl_seconds=int(content_data.get("cache_ttl_seconds", 300)),
        cache_max_entries=int(content_data.get("cache_max_entries", 256)),
        timeout_seconds=float(content_data.get("timeout_seconds", 10.0)),
    )
    if content_service.cache_max_entries < 1:
        raise ConfigValidationError("'content_service.cache_max_entries' must be >= 1")

    database = DatabaseConfig(
        path=_validate_required_field(database_data, "path", "database"),
    )

    distribution = _load_distribution(data.get("distribution"))

    # BrokerConfig (optional)
    broker: BrokerConfig | None = None
    broker_data = data.get("broker")
    if broker_data:
        broker = BrokerConfig(
            url=_validate_required_field(broker_data, "url", "broker"),
            stream=broker_data.get("stream", "church.events"),
        )
    if distribution.notification_transport == "broker" and broker is None:
        raise ConfigValidationError(
            "'broker' section is required when notification_transport is 'broker'"
        )

    http_data = data.get("http") or {}
    http = HttpConfig(
        host=http_data.get("host", "0.0.0.0"),
        port=int(http_data.get("port", 8080)),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_llm_messages=logging_data.get("debug_llm_messages", False),
        )

    return Config(
        llm=llm,
        signal=signal,
        content_service=content_service,
        database=database,
        distribution=distribution,
        http=http,
        broker=broker,
        logging=logging_config,
    )
