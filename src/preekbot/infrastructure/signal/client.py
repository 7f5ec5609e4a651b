"""Signal send service client."""

import asyncio
import logging
from typing import Any

import httpx

from preekbot.config import SignalConfig
from preekbot.domain.services import NotificationResult, normalize_phone_number

logger = logging.getLogger(__name__)


class SignalNotificationChannel:
    """Signal 送信サービス経由の通知チャネル

    タイムアウト・接続エラー・429・5xx は retry_delay_seconds x 試行回数の間隔で
    max_retries 回まで再試行する。例外は送出せず、結果で成否を返す。
    """

    def __init__(
        self,
        config: SignalConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初期化

        Args:
            config: Signal 設定
            transport: httpx のトランスポート（テスト用）
        """
        self._config = config
        self._transport = transport

    async def send_message(
        self,
        recipient: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> NotificationResult:
        """メッセージを送信する

        Args:
            recipient: 宛先の電話番号
            text: 本文
            metadata: 付加情報

        Returns:
            NotificationResult
        """
        payload = {
            "from": self._config.number,
            "to": normalize_phone_number(recipient),
            "message": text,
            "metadata": metadata or {},
        }
        attempts = max(1, self._config.max_retries)
        error = "unknown error"

        for attempt in range(1, attempts + 1):
            try:
                async with httpx.AsyncClient(
                    base_url=self._config.service_url,
                    timeout=self._config.timeout_seconds,
                    transport=self._transport,
                ) as client:
                    response = await client.post("/api/v1/send", json=payload)
                    response.raise_for_status()

                logger.info(
                    "Message sent via Signal service: recipient=%s, length=%d",
                    recipient,
                    len(text),
                )
                return NotificationResult(success=True)

            except httpx.HTTPStatusError as e:
                error = f"Unexpected status code: {e.response.status_code}"
                status = e.response.status_code
                if status != 429 and status < 500:
                    break
            except httpx.TimeoutException:
                error = "Request timed out"
            except httpx.RequestError as e:
                error = str(e) or type(e).__name__

            if attempt < attempts:
                delay = self._config.retry_delay_seconds * attempt
                logger.warning(
                    "Signal send failed (attempt %d/%d), retrying in %.1fs: %s",
                    attempt,
                    attempts,
                    delay,
                    error,
                )
                await asyncio.sleep(delay)

        logger.error(
            "Failed to send message via Signal service: recipient=%s, error=%s",
            recipient,
            error,
        )
        return NotificationResult(success=False, error=error)
