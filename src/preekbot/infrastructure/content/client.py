"""Content service HTTP client."""

import hashlib
import logging
import time
from collections import OrderedDict
from typing import Any

import httpx

from preekbot.config import ContentServiceConfig

logger = logging.getLogger(__name__)

_MISSING = object()


class ContentServiceClient:
    """コンテンツサービスのクライアント

    読み取り系の結果（None を含む）は cache_ttl_seconds の間メモリにキャッシュする。
    キャッシュは最大 cache_max_entries 件で、超えた分は最も古く使われたものから捨てる。
    通信エラーは例外にせず None / False を返す。
    """

    def __init__(
        self,
        config: ContentServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初期化

        Args:
            config: コンテンツサービス設定
            transport: httpx のトランスポート（テスト用）
        """
        self._config = config
        self._transport = transport
        self._cache: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    async def get_content_details(
        self, content_id: str, audience: str = "general"
    ) -> str | None:
        """配信用のコンテンツ本文を取得する

        Args:
            content_id: コンテンツ ID
            audience: 対象

        Returns:
            本文（取得できない場合は None）
        """
        data = await self._get_cached(
            f"content_details:{content_id}:{audience}",
            f"/api/v1/content/{content_id}",
            params={"audience": audience},
        )
        if not isinstance(data, dict):
            return None
        return data.get("content") or None

    async def get_vector_store(self, church_id: int) -> str | None:
        """教会のベクトルストア ID を取得する"""
        data = await self._get_cached(
            f"vector_store:{church_id}", f"/api/v1/vector-store/{church_id}"
        )
        if not isinstance(data, dict):
            return None
        return data.get("vector_store_id") or None

    async def get_church_by_name(self, name: str) -> dict[str, Any] | None:
        """名前で教会を検索する

        名前を部分一致で含む最初の教会、なければ検索結果の先頭を返す。
        """
        digest = hashlib.md5(name.lower().encode("utf-8")).hexdigest()
        data = await self._get_cached(
            f"church_by_name:{digest}",
            "/api/v1/churches/search",
            params={"name": name},
        )
        if not isinstance(data, dict):
            return None
        churches = [c for c in data.get("data") or [] if isinstance(c, dict)]
        if not churches:
            return None
        for church in churches:
            if name.lower() in str(church.get("name", "")).lower():
                return church
        return churches[0]

    async def get_sermon_summary(
        self, sermon_id: str, audience: str = "volwassen"
    ) -> str | None:
        """説教の要約を取得する"""
        data = await self._get_cached(
            f"sermon_summary:{sermon_id}:{audience}",
            f"/api/v1/sermons/{sermon_id}/summary",
            params={"audience": audience},
        )
        if not isinstance(data, dict):
            return None
        return data.get("summary") or data.get("content") or None

    async def submit_feedback(self, payload: dict[str, Any]) -> bool:
        """フィードバックを送信する

        Returns:
            成功した場合 True
        """
        try:
            async with self._client() as client:
                response = await client.post("/api/v1/feedback", json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to submit feedback %s: %s", payload.get("id", "unknown"), e
            )
            return False

        logger.info("Feedback submitted: %s", payload.get("id", "unknown"))
        return True

    def clear_cache(self) -> None:
        """キャッシュを消去する"""
        self._cache.clear()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.url,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def _get_cached(
        self,
        key: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            expires_at, value = cached  # type: ignore[misc]
            if expires_at > time.monotonic():
                self._cache.move_to_end(key)
                return value
            del self._cache[key]

        try:
            async with self._client() as client:
                response = await client.get(path, params=params)
                if response.status_code == 404:
                    value = None
                else:
                    response.raise_for_status()
                    value = response.json()
        except httpx.HTTPError as e:
            # 失敗はキャッシュしない
            logger.warning("Content service request failed: %s - %s", path, e)
            return None
        except ValueError as e:
            logger.warning("Content service returned invalid JSON: %s - %s", path, e)
            return None

        self._store(key, value)
        return value

    def _store(self, key: str, value: Any) -> None:
        now = time.monotonic()
        expired = [k for k, (expires_at, _) in self._cache.items() if expires_at <= now]
        for k in expired:
            del self._cache[k]

        self._cache[key] = (now + self._config.cache_ttl_seconds, value)
        self._cache.move_to_end(key)
        while len(self._cache) > self._config.cache_max_entries:
            self._cache.popitem(last=False)
