"""IdentityProvider のユニットテスト"""

import asyncio
import uuid

from conftest import RecordingLogger
from setbit import USER_ID_STORAGE_KEY, IdentityProvider, InMemoryStorage, SdkLogger, Storage


class CountingStorage(InMemoryStorage):
    """get / set の呼び出し回数を数えるストレージ。"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.get_calls = 0
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key: str, value: str) -> bool:
        self.set_calls += 1
        return await super().set(key, value)


class BrokenStorage(Storage):
    async def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    async def set(self, key: str, value: str) -> bool:
        raise OSError("storage unavailable")


class RejectingStorage(Storage):
    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str) -> bool:
        return False


async def test_init_generates_and_persists_user_id() -> None:
    """保存済み ID が無ければ生成して保存すること。"""
    storage = CountingStorage()
    provider = IdentityProvider(storage)
    await provider.init()
    assert provider.initialized is True
    assert provider.auto_user_id is not None
    uuid.UUID(provider.auto_user_id)
    assert await storage.get(USER_ID_STORAGE_KEY) == provider.auto_user_id


async def test_init_loads_existing_user_id() -> None:
    """保存済み ID があればそれを使うこと。"""
    storage = CountingStorage({USER_ID_STORAGE_KEY: "persisted-id"})
    provider = IdentityProvider(storage)
    await provider.init()
    assert provider.auto_user_id == "persisted-id"
    assert storage.set_calls == 0


async def test_init_is_idempotent() -> None:
    """2 回呼んでも同じ ID で、ストレージ I/O は初回のみ。"""
    storage = CountingStorage()
    provider = IdentityProvider(storage)
    await provider.init()
    first = provider.auto_user_id
    await provider.init()
    assert provider.auto_user_id == first
    assert storage.get_calls == 1
    assert storage.set_calls == 1


async def test_concurrent_init_reads_storage_once() -> None:
    """同時に init されてもストレージ I/O は 1 回。"""
    storage = CountingStorage()
    provider = IdentityProvider(storage)
    await asyncio.gather(provider.init(), provider.init(), provider.init())
    assert storage.get_calls == 1
    assert storage.set_calls == 1


async def test_init_storage_failure_uses_ephemeral_id(recording_logger: RecordingLogger) -> None:
    """ストレージ障害でも例外を出さず、一時 ID で初期化を完了すること。"""
    provider = IdentityProvider(BrokenStorage(), SdkLogger(silent=False, logger=recording_logger))
    await provider.init()
    assert provider.initialized is True
    assert provider.auto_user_id is not None
    assert recording_logger.events("warning") == ["Failed to persist user ID"]


async def test_init_storage_failure_silent(recording_logger: RecordingLogger) -> None:
    """silent の場合はストレージ障害をログ出力しないこと。"""
    provider = IdentityProvider(BrokenStorage(), SdkLogger(silent=True, logger=recording_logger))
    await provider.init()
    assert provider.initialized is True
    assert recording_logger.records == []


async def test_init_rejected_write_keeps_generated_id(recording_logger: RecordingLogger) -> None:
    """保存が拒否されても生成した ID をメモリ上で使うこと。"""
    provider = IdentityProvider(RejectingStorage(), SdkLogger(silent=False, logger=recording_logger))
    await provider.init()
    assert provider.initialized is True
    assert provider.auto_user_id is not None
    assert recording_logger.events("warning") == ["Failed to persist user ID"]


async def test_resolve_prefers_provided_user_id() -> None:
    """指定されたユーザー ID が優先されること。"""
    provider = IdentityProvider(InMemoryStorage({USER_ID_STORAGE_KEY: "auto"}))
    await provider.init()
    assert provider.resolve("user-1") == "user-1"
    assert provider.resolve() == "auto"
    assert provider.resolve("") == "auto"


def test_resolve_before_init_returns_fresh_id() -> None:
    """init 前は呼び出しごとに保存されない一時 ID を返すこと。"""
    storage = CountingStorage()
    provider = IdentityProvider(storage)
    first = provider.resolve()
    second = provider.resolve()
    assert first and second
    assert first != second
    assert provider.auto_user_id is None
    assert storage.set_calls == 0
