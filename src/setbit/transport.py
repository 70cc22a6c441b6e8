"""SetBit API の HTTP トランスポート"""

from __future__ import annotations

import json
from typing import Any

import httpx

from .config import SetBitConfig
from .exceptions import SetBitError, SetBitErrorCodes
from .logger import SdkLogger
from .models import FlagResult, TrackEvent
from .retry import with_retry

EVALUATE_PATH = "/v1/evaluate"
TRACK_PATH = "/v1/track"


class HttpTransport:
    """httpx を使った evaluate / track エンドポイントの呼び出し。"""

    def __init__(
        self,
        config: SetBitConfig,
        http_client: httpx.AsyncClient | None = None,
        logger: SdkLogger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or SdkLogger(silent=config.silent, api_url=config.api_url)
        self._headers: dict[str, str] = {"Content-Type": "application/json"}
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    def _url(self, path: str) -> str:
        return f"{self._config.api_url.rstrip('/')}{path}"

    async def fetch_flags(self, user_id: str) -> dict[str, FlagResult]:
        """ユーザー×タグで見える全フラグを取得する。

        Raises:
            SetBitError: 接続失敗（リトライ後）、HTTP エラー、不正なレスポンスの場合
        """
        params = {
            "apiKey": self._config.api_key,
            "userId": user_id,
            "tags": json.dumps(self._config.tags, separators=(",", ":")),
        }

        async def send() -> httpx.Response:
            return await self._client.get(
                self._url(EVALUATE_PATH), params=params, headers=self._headers
            )

        try:
            resp = await with_retry(
                self._config.retry_attempts,
                self._config.retry_delay_seconds,
                send,
                retry_on=(httpx.TransportError,),
            )
        except httpx.TransportError as e:
            raise SetBitError(
                code=SetBitErrorCodes.CONNECTION_ERROR,
                message=f"Failed to fetch flags after {self._config.retry_attempts} attempt(s): {e}",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise SetBitError(
                code=SetBitErrorCodes.CONNECTION_ERROR,
                message=f"Failed to fetch flags: {e}",
                cause=e,
            ) from e

        # HTTP ステータスエラーはリトライしない
        if resp.status_code != 200:
            raise SetBitError(
                code=SetBitErrorCodes.HTTP_ERROR,
                message=f"fetch_flags: HTTP {resp.status_code}: {resp.reason_phrase}",
            )
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise SetBitError(
                code=SetBitErrorCodes.INVALID_RESPONSE,
                message=f"fetch_flags: response is not JSON: {e}",
                cause=e,
            ) from e
        if not isinstance(data, dict):
            raise SetBitError(
                code=SetBitErrorCodes.INVALID_RESPONSE,
                message="fetch_flags: response root must be an object",
            )
        return {
            name: FlagResult.from_dict(value)
            for name, value in data.items()
            if isinstance(value, dict)
        }

    async def track_event(self, event: TrackEvent) -> None:
        """計測イベントを送信する。失敗はログのみで例外は送出しない。"""
        body = {"apiKey": self._config.api_key, **event.to_dict()}
        try:
            resp = await self._client.post(
                self._url(TRACK_PATH), json=body, headers=self._headers
            )
        except Exception as e:
            self._logger.warning(
                "Failed to track event", event_name=event.event_name, error=str(e)
            )
            return
        if resp.status_code != 200:
            self._logger.warning(
                "Failed to track event",
                event_name=event.event_name,
                status_code=resp.status_code,
            )

    async def aclose(self) -> None:
        await self._client.aclose()
