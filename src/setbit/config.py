"""クライアント設定（pydantic BaseModel）と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import SetBitError, SetBitErrorCodes

DEFAULT_API_URL = "https://flags.setbit.io"
DEFAULT_CACHE_TTL_SECONDS = 300.0


class SetBitConfig(BaseModel):
    """SetBit クライアント設定。生成後は変更不可。"""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    tags: dict[str, str] = Field(default_factory=dict)
    api_url: str = DEFAULT_API_URL
    cache_enabled: bool = True
    cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, ge=0)
    retry_attempts: int = Field(default=2, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0)
    silent: bool = True

    def copy_with(self, **changes: Any) -> SetBitConfig:
        """指定フィールドを差し替えた新しい設定を返す。"""
        return SetBitConfig.model_validate({**self.model_dump(), **changes})


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """base と override をディープマージして新しい辞書を返す。

    override の値が優先される。tags も辞書単位でマージする。
    """
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SetBitError(
            code=SetBitErrorCodes.CONFIG_ERROR,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise SetBitError(
            code=SetBitErrorCodes.CONFIG_ERROR,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise SetBitError(
            code=SetBitErrorCodes.CONFIG_ERROR,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load_config(base_path: Path, env_path: Path | None = None) -> SetBitConfig:
    """YAML 設定ファイルを読み込んで SetBitConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    try:
        return SetBitConfig.model_validate(data)
    except ValidationError as e:
        raise SetBitError(
            code=SetBitErrorCodes.CONFIG_ERROR,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
