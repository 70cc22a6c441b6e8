"""永続ストレージ抽象基底クラスと実装"""

from __future__ import annotations

import asyncio
import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from .exceptions import SetBitError, SetBitErrorCodes


def default_storage_path() -> Path:
    """既定の保存先 ~/.setbit/storage.json を返す。"""
    return Path.home() / ".setbit" / "storage.json"


class Storage(ABC):
    """文字列値を保存するキーバリューストレージ。"""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """キーに対応する値を取得する。存在しなければ None。"""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """キーと値を保存する。保存できたら True。"""
        ...


class InMemoryStorage(Storage):
    """プロセス内でのみ保持するストレージ。"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._store[key] = value
        return True


class FileStorage(Storage):
    """JSON ファイル 1 つに全キーを保存するストレージ。

    ファイル I/O はデフォルトの executor で実行し、イベントループをブロックしない。
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path is not None else default_storage_path()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise SetBitError(
                code=SetBitErrorCodes.STORAGE_ERROR,
                message=f"Failed to read storage file: {self._path}",
                cause=e,
            ) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SetBitError(
                code=SetBitErrorCodes.STORAGE_ERROR,
                message=f"Storage file is not valid JSON: {self._path}",
                cause=e,
            ) from e
        if not isinstance(data, dict):
            raise SetBitError(
                code=SetBitErrorCodes.STORAGE_ERROR,
                message=f"Storage file root must be an object: {self._path}",
            )
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _get_sync(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def _set_sync(self, key: str, value: str) -> bool:
        with self._lock:
            data = self._read()
            data[key] = value
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(json.dumps(data), encoding="utf-8")
            except OSError as e:
                raise SetBitError(
                    code=SetBitErrorCodes.STORAGE_ERROR,
                    message=f"Failed to write storage file: {self._path}",
                    cause=e,
                ) from e
            return True

    async def get(self, key: str) -> str | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._get_sync, key)

    async def set(self, key: str, value: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._set_sync, key, value)
