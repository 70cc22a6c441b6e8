"""匿名ユーザー ID の解決"""

from __future__ import annotations

import asyncio
import uuid

from .logger import SdkLogger
from .storage import Storage

USER_ID_STORAGE_KEY = "setbit_uid"


def _generate_user_id() -> str:
    return str(uuid.uuid4())


class IdentityProvider:
    """呼び出しごとの実効ユーザー ID を決定する。

    init() でストレージから匿名 ID を読み込み、なければ生成して保存する。
    ストレージ障害時はメモリ上の一時 ID で初期化を完了させ、例外は外に出さない。
    """

    def __init__(self, storage: Storage, logger: SdkLogger | None = None) -> None:
        self._storage = storage
        self._logger = logger or SdkLogger()
        self._auto_user_id: str | None = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def auto_user_id(self) -> str | None:
        return self._auto_user_id

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """匿名 ID を読み込む。2 回目以降の呼び出しは何もしない。"""
        async with self._lock:
            if self._initialized:
                return
            try:
                user_id = await self._storage.get(USER_ID_STORAGE_KEY)
                if not user_id:
                    user_id = _generate_user_id()
                    if not await self._storage.set(USER_ID_STORAGE_KEY, user_id):
                        self._logger.warning(
                            "Failed to persist user ID", reason="storage rejected write"
                        )
                self._auto_user_id = user_id
            except Exception as e:
                self._auto_user_id = _generate_user_id()
                self._logger.warning("Failed to persist user ID", error=str(e))
            self._initialized = True

    def resolve(self, provided_user_id: str | None = None) -> str:
        """実効ユーザー ID を返す。指定 ID があればそれを優先する。"""
        if provided_user_id:
            return provided_user_id
        # init 前・失敗時でも必ず何らかの ID を返す（保存はしない）
        return self._auto_user_id or _generate_user_id()
