"""InMemoryFlagClient 実装"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .models import FlagResult, TrackEvent


class InMemoryFlagClient:
    """アプリケーションのテスト用インメモリフラグクライアント。

    フラグはユーザーに関係なく同じ結果を返す。track したイベントは events に溜まる。
    """

    def __init__(self, flags: Mapping[str, FlagResult] | None = None) -> None:
        self._flags: dict[str, FlagResult] = dict(flags or {})
        self.events: list[TrackEvent] = []

    def set_flag(self, flag_name: str, result: FlagResult) -> None:
        """フラグを設定する。"""
        self._flags[flag_name] = result

    async def init(self) -> None:
        return None

    async def enabled(
        self, flag_name: str, user_id: str | None = None, default_value: bool = False
    ) -> bool:
        result = self._flags.get(flag_name)
        return default_value if result is None else result.enabled

    async def variant(
        self, flag_name: str, user_id: str | None = None, default_variant: str = "control"
    ) -> str:
        result = self._flags.get(flag_name)
        if result is None or not result.enabled or result.variant is None:
            return default_variant
        return result.variant

    async def track(
        self,
        event_name: str,
        user_id: str | None = None,
        flag_name: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        result = self._flags.get(flag_name) if flag_name is not None else None
        self.events.append(
            TrackEvent(
                event_name=event_name,
                user_id=user_id or "",
                flag_name=flag_name,
                variant=result.variant if result is not None else None,
                metadata=metadata,
            )
        )
