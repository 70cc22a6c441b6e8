"""ユーザー×タグ単位のフラグ評価結果キャッシュ"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable, Mapping
from types import MappingProxyType

from .models import FlagResult


def make_cache_key(tags: Mapping[str, str], user_id: str) -> str:
    """タグとユーザー ID からキャッシュキーを生成する。タグの挿入順には依存しない。"""
    sorted_tags = dict(sorted(tags.items()))
    return f"{json.dumps(sorted_tags, separators=(',', ':'))}:{user_id}"


class _CacheEntry:
    __slots__ = ("flags", "fetched_at")

    def __init__(self, flags: Mapping[str, FlagResult], fetched_at: float) -> None:
        self.flags: Mapping[str, FlagResult] = MappingProxyType(dict(flags))
        self.fetched_at = fetched_at


class FlagCache:
    """評価 API の 1 レスポンス（全フラグのスナップショット）をキー単位で保持する。

    期限切れのエントリも削除せず、取得失敗時のフォールバックとして読み出せる。
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._store: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Mapping[str, FlagResult] | None:
        """キーのフラグ一覧を返す。期限切れでも返す。"""
        with self._lock:
            entry = self._store.get(key)
        return entry.flags if entry is not None else None

    def put(self, key: str, flags: Mapping[str, FlagResult]) -> None:
        """キーのフラグ一覧を丸ごと差し替え、取得時刻を記録する。"""
        entry = _CacheEntry(flags, self._clock())
        with self._lock:
            self._store[key] = entry

    def is_valid(self, key: str) -> bool:
        """エントリが存在し、かつ TTL 内であれば True。"""
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            return False
        return self._clock() - entry.fetched_at < self._ttl

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
