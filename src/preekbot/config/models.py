"""設定データクラス"""

from dataclasses import dataclass


@dataclass
class LLMConfig:
    """LLM設定（OpenAI Responses API）

    Attributes:
        model: モデル名（LiteLLM の model 文字列）
        api_key: API キー
        api_base: API のベース URL
        max_retries: 一時的なエラー時の最大試行回数
        retry_delay_seconds: リトライ間隔の基準秒数（試行回数倍される）
        timeout_seconds: リクエストタイムアウト秒数
        max_tool_depth: ツール呼び出しの再帰上限
    """

    model: str
    api_key: str
    api_base: str = "https://api.openai.com/v1"
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    timeout_seconds: float = 60.0
    max_tool_depth: int = 5


@dataclass
class SignalConfig:
    """Signal 送信サービス設定

    Attributes:
        service_url: 送信サービスのベース URL
        number: 送信元の電話番号
        timeout_seconds: リクエストタイムアウト秒数
        max_retries: 一時的なエラー時の最大試行回数
        retry_delay_seconds: リトライ間隔の基準秒数（試行回数倍される）
    """

    service_url: str
    number: str = "+31682016353"
    timeout_seconds: float = 10.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class ContentServiceConfig:
    """コンテンツサービス設定"""

    url: str
    cache_ttl_seconds: int = 300
    cache_max_entries: int = 256
    timeout_seconds: float = 10.0


@dataclass
class DatabaseConfig:
    """データベース設定"""

    path: str


@dataclass
class DistributionConfig:
    """配信キュー設定

    Attributes:
        batch_size: 1回の処理で取り出すチケット数
        interval_seconds: 連続実行時の処理間隔
        max_workers: 同時に処理するチケット数（1 で逐次処理）
        max_retries: ERROR に遷移するまでの失敗回数
        notification_transport: 通知の送信経路（"signal" または "broker"）
    """

    batch_size: int = 10
    interval_seconds: float = 5.0
    max_workers: int = 1
    max_retries: int = 3
    notification_transport: str = "signal"


@dataclass
class BrokerConfig:
    """外部メッセージブローカー設定"""

    url: str
    stream: str = "church.events"


@dataclass
class HttpConfig:
    """HTTP サーバー設定"""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_llm_messages: bool = False


@dataclass
class Config:
    """アプリケーション設定"""

    llm: LLMConfig
    signal: SignalConfig
    content_service: ContentServiceConfig
    database: DatabaseConfig
    distribution: DistributionConfig
    http: HttpConfig
    broker: BrokerConfig | None = None
    logging: LoggingConfig | None = None
