"""設定ローダーのテスト"""

import os
from pathlib import Path
from typing import Any, Generator

import pytest
import yaml

from preekbot.config import (
    BrokerConfig,
    Config,
    ConfigValidationError,
    DistributionConfig,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)


@pytest.fixture
def env_vars() -> Generator[dict[str, str], None, None]:
    """テスト用環境変数を設定・クリーンアップ"""
    test_vars = {
        "TEST_OPENAI_KEY": "sk-test",
        "TEST_VAR_A": "valueA",
        "TEST_VAR_B": "valueB",
    }
    for key, value in test_vars.items():
        os.environ[key] = value
    yield test_vars
    for key in test_vars:
        os.environ.pop(key, None)


def minimal_config() -> dict[str, Any]:
    return {
        "llm": {"model": "openai/gpt-4o", "api_key": "sk-test"},
        "signal": {"service_url": "http://signal:8080"},
        "content_service": {"url": "http://content:8000"},
        "database": {"path": "./data/preekbot.db"},
    }


def write_config(tmp_path: Path, data: dict[str, Any]) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestExpandEnvVars:
    """expand_env_vars関数のテスト"""

    def test_single_variable(self, env_vars: dict[str, str]) -> None:
        """単一の変数を展開できる"""
        assert expand_env_vars("${TEST_OPENAI_KEY}") == "sk-test"

    def test_multiple_variables(self, env_vars: dict[str, str]) -> None:
        """複数の変数を展開できる"""
        assert expand_env_vars("${TEST_VAR_A}_${TEST_VAR_B}") == "valueA_valueB"

    def test_no_variables(self) -> None:
        """変数がない場合はそのまま返す"""
        assert expand_env_vars("plain text") == "plain text"

    def test_undefined_variable(self) -> None:
        """未設定の変数でEnvironmentVariableErrorが発生"""
        with pytest.raises(EnvironmentVariableError) as exc_info:
            expand_env_vars("${UNDEFINED_VAR_12345}")
        assert "UNDEFINED_VAR_12345" in str(exc_info.value)

    def test_empty_string(self) -> None:
        """空文字列はそのまま返す"""
        assert expand_env_vars("") == ""


class TestLoadConfig:
    """load_config関数のテスト"""

    def test_minimal_config(self, tmp_path: Path) -> None:
        """必須項目のみで読み込め、省略項目はデフォルト値になる"""
        config = load_config(write_config(tmp_path, minimal_config()))

        assert isinstance(config, Config)
        assert config.llm.model == "openai/gpt-4o"
        assert config.llm.api_base == "https://api.openai.com/v1"
        assert config.llm.max_tool_depth == 5
        assert config.signal.number == "+31682016353"
        assert config.content_service.cache_ttl_seconds == 300
        assert config.distribution == DistributionConfig()
        assert config.http.port == 8080
        assert config.broker is None
        assert config.logging is None

    def test_env_vars_expanded(
        self, tmp_path: Path, env_vars: dict[str, str]
    ) -> None:
        """ネストした値の環境変数が展開される"""
        data = minimal_config()
        data["llm"]["api_key"] = "${TEST_OPENAI_KEY}"

        config = load_config(write_config(tmp_path, data))

        assert config.llm.api_key == "sk-test"

    def test_full_config(self, tmp_path: Path) -> None:
        """任意セクションを読み込める"""
        data = minimal_config()
        data["distribution"] = {
            "batch_size": 25,
            "interval_seconds": 2.5,
            "max_workers": 4,
            "max_retries": 5,
            "notification_transport": "broker",
        }
        data["broker"] = {"url": "redis://localhost:6379/0"}
        data["http"] = {"host": "127.0.0.1", "port": 9000}
        data["logging"] = {"level": "DEBUG", "loggers": {"httpx": "WARNING"}}

        config = load_config(write_config(tmp_path, data))

        assert config.distribution.batch_size == 25
        assert config.distribution.interval_seconds == 2.5
        assert config.distribution.max_workers == 4
        assert config.distribution.max_retries == 5
        assert config.broker == BrokerConfig(url="redis://localhost:6379/0")
        assert config.http.host == "127.0.0.1"
        assert config.http.port == 9000
        assert config.logging is not None
        assert config.logging.level == "DEBUG"
        assert config.logging.loggers == {"httpx": "WARNING"}
        assert config.logging.debug_llm_messages is False

    @pytest.mark.parametrize(
        "section", ["llm", "signal", "content_service", "database"]
    )
    def test_missing_section(self, tmp_path: Path, section: str) -> None:
        """必須セクションが欠落している場合はエラー"""
        data = minimal_config()
        del data[section]

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, data))
        assert section in str(exc_info.value)

    def test_missing_nested_field(self, tmp_path: Path) -> None:
        """必須フィールドのエラーメッセージにパスが含まれる"""
        data = minimal_config()
        del data["llm"]["api_key"]

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(tmp_path, data))
        assert "llm.api_key" in str(exc_info.value)

    def test_broker_transport_requires_broker(self, tmp_path: Path) -> None:
        data = minimal_config()
        data["distribution"] = {"notification_transport": "broker"}

        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, data))

    def test_unknown_transport(self, tmp_path: Path) -> None:
        data = minimal_config()
        data["distribution"] = {"notification_transport": "email"}

        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, data))

    @pytest.mark.parametrize("field", ["batch_size", "max_workers"])
    def test_invalid_distribution_values(self, tmp_path: Path, field: str) -> None:
        data = minimal_config()
        data["distribution"] = {field: 0}

        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, data))

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        """空ファイルは必須セクション欠落として扱う"""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_cache_max_entries(self, tmp_path: Path) -> None:
        """キャッシュ件数の上限は既定 256、1 未満はエラー"""
        config = load_config(write_config(tmp_path, minimal_config()))
        assert config.content_service.cache_max_entries == 256

        data = minimal_config()
        data["content_service"]["cache_max_entries"] = 0
        with pytest.raises(ConfigValidationError):
            load_config(write_config(tmp_path, data))
