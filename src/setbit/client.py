"""FlagClient プロトコル"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class FlagClientProtocol(Protocol):
    """フィーチャーフラグクライアントプロトコル。"""

    async def init(self) -> None: ...

    async def enabled(
        self, flag_name: str, user_id: str | None = None, default_value: bool = False
    ) -> bool: ...

    async def variant(
        self, flag_name: str, user_id: str | None = None, default_variant: str = "control"
    ) -> str: ...

    async def track(
        self,
        event_name: str,
        user_id: str | None = None,
        flag_name: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None: ...
