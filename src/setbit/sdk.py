"""SetBitClient 実装"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

import httpx

from .cache import FlagCache, make_cache_key
from .config import SetBitConfig
from .exceptions import SetBitError
from .identity import IdentityProvider
from .logger import SdkLogger
from .models import FlagResult, TrackEvent
from .storage import FileStorage, Storage
from .transport import HttpTransport


class SetBitClient:
    """フィーチャーフラグ評価・A/B テスト・コンバージョン計測クライアント。

    評価結果はユーザー×タグ単位でキャッシュし、API に到達できない場合は
    期限切れキャッシュ、それもなければ呼び出し側のデフォルト値を返す。

    Example:
        config = SetBitConfig(api_key="pk_xxx", tags={"env": "production"})
        async with SetBitClient(config) as client:
            await client.init()
            if await client.enabled("new-checkout", user_id="user123"):
                ...
    """

    def __init__(
        self,
        config: SetBitConfig,
        *,
        storage: Storage | None = None,
        http_client: httpx.AsyncClient | None = None,
        logger: SdkLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._logger = logger or SdkLogger(silent=config.silent, api_url=config.api_url)
        self._identity = IdentityProvider(storage or FileStorage(), self._logger)
        self._cache = FlagCache(config.cache_ttl_seconds, clock=clock)
        self._transport = HttpTransport(config, http_client=http_client, logger=self._logger)

    @property
    def config(self) -> SetBitConfig:
        return self._config

    @property
    def auto_user_id(self) -> str | None:
        """端末に保存された匿名ユーザー ID。"""
        return self._identity.auto_user_id

    @property
    def is_initialized(self) -> bool:
        return self._identity.initialized

    async def init(self) -> None:
        """匿名ユーザー ID を読み込む（なければ生成・保存する）。他のメソッドより先に呼ぶ。"""
        await self._identity.init()

    async def enabled(
        self,
        flag_name: str,
        user_id: str | None = None,
        default_value: bool = False,
    ) -> bool:
        """フラグが有効か判定する。評価できない場合は default_value を返す。"""
        if not self.is_initialized:
            self._logger.warning("SDK not initialized. Call init() first.", flag_name=flag_name)
            return default_value

        result = await self._evaluate_flag(flag_name, self._identity.resolve(user_id))
        if result is None:
            return default_value
        return result.enabled

    async def variant(
        self,
        flag_name: str,
        user_id: str | None = None,
        default_variant: str = "control",
    ) -> str:
        """実験・ロールアウトフラグのバリアントを返す。

        フラグが無効、またはバリアントが付いていない場合は default_variant を返す。
        """
        if not self.is_initialized:
            self._logger.warning("SDK not initialized. Call init() first.", flag_name=flag_name)
            return default_variant

        result = await self._evaluate_flag(flag_name, self._identity.resolve(user_id))
        if result is None or not result.enabled:
            return default_variant
        return result.variant if result.variant is not None else default_variant

    async def track(
        self,
        event_name: str,
        user_id: str | None = None,
        flag_name: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """コンバージョンイベントを送信する。失敗しても例外は送出しない。

        flag_name を指定すると、キャッシュ済みの評価結果からバリアントを引き当てて
        イベントに含める。ここで評価 API を呼ぶことはない。
        """
        if not self.is_initialized:
            self._logger.warning("SDK not initialized. Call init() first.", event_name=event_name)
            return

        effective_user_id = self._identity.resolve(user_id)

        variant: str | None = None
        if flag_name is not None:
            cached = self._cache.get(make_cache_key(self._config.tags, effective_user_id))
            if cached is not None and flag_name in cached:
                variant = cached[flag_name].variant

        event = TrackEvent(
            event_name=event_name,
            user_id=effective_user_id,
            flag_name=flag_name,
            variant=variant,
            metadata=metadata,
        )
        await self._transport.track_event(event)

    async def refresh(self, user_id: str | None = None) -> None:
        """キャッシュを破棄し、指定ユーザーのフラグを取得し直す。"""
        self.clear_cache()
        if not self.is_initialized:
            return
        effective_user_id = self._identity.resolve(user_id)
        try:
            await self._fetch_and_store(effective_user_id)
        except SetBitError as e:
            self._logger.warning("Failed to refresh flags", user_id=effective_user_id, error=str(e))

    def clear_cache(self) -> None:
        self._cache.clear()

    async def aclose(self) -> None:
        """HTTP クライアントを閉じる。以降の呼び出しは失敗しうる。"""
        await self._transport.aclose()

    async def __aenter__(self) -> SetBitClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _fetch_and_store(self, user_id: str) -> dict[str, FlagResult]:
        flags = await self._transport.fetch_flags(user_id)
        if self._config.cache_enabled:
            self._cache.put(make_cache_key(self._config.tags, user_id), flags)
        return flags

    async def _evaluate_flag(self, flag_name: str, user_id: str) -> FlagResult | None:
        cache_key = make_cache_key(self._config.tags, user_id)

        if self._config.cache_enabled and self._cache.is_valid(cache_key):
            cached = self._cache.get(cache_key)
            if cached is not None and flag_name in cached:
                return cached[flag_name]

        try:
            flags = await self._fetch_and_store(user_id)
            return flags.get(flag_name)
        except SetBitError as e:
            self._logger.warning("Failed to evaluate flag", flag_name=flag_name, error=str(e))

        # 取得失敗時は期限切れでもキャッシュを返す
        cached = self._cache.get(cache_key)
        if cached is not None and flag_name in cached:
            self._logger.debug("Using stale cached flag", flag_name=flag_name)
            return cached[flag_name]
        return None
