"""固定間隔リトライ実行"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


async def with_retry(
    attempts: int,
    delay_seconds: float,
    fn: Callable[[], Awaitable[T]],
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """非同期関数を最大 attempts 回実行する。

    retry_on に該当する例外のみリトライし、試行の間は delay_seconds だけ待機する。
    上限に達した場合は最後の例外をそのまま送出する。
    """
    for _ in range(max(attempts, 1) - 1):
        try:
            return await fn()
        except retry_on:
            await asyncio.sleep(delay_seconds)
    # 最後の試行の例外は呼び出し側へ送出する
    return await fn()
