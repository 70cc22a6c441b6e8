"""setbit データモデル"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FlagResult:
    """1 ユーザー・1 フラグに対するサーバーの評価結果。"""

    enabled: bool
    variant: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FlagResult:
        """評価 API レスポンスの 1 エントリから FlagResult を生成する。

        enabled が真偽値でなければ False、variant が文字列でなければ None とみなす。
        """
        enabled = data.get("enabled")
        variant = data.get("variant")
        return cls(
            enabled=enabled if isinstance(enabled, bool) else False,
            variant=variant if isinstance(variant, str) else None,
        )


@dataclass
class TrackEvent:
    """コンバージョン計測イベント。"""

    event_name: str
    user_id: str
    flag_name: str | None = None
    variant: str | None = None
    metadata: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """track API のリクエストボディ形式に変換する。None のフィールドは含めない。"""
        data: dict[str, Any] = {
            "eventName": self.event_name,
            "userId": self.user_id,
        }
        if self.flag_name is not None:
            data["flagName"] = self.flag_name
        if self.variant is not None:
            data["variant"] = self.variant
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data
