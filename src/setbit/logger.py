"""SDK 内部のログ出力ポリシー（structlog）"""

from __future__ import annotations

from typing import Any

import structlog


class SdkLogger:
    """SDK 内部のログ出力ポリシー。

    silent の場合は何も出力しない。評価ロジックからはこのオブジェクト経由でのみ
    ログを出すので、テストでは記録用のロガーを差し込める。logger 未指定時は
    "setbit" の structlog ロガーに context（api_url など）を bind して使う。
    """

    def __init__(self, silent: bool = True, logger: Any | None = None, **context: Any) -> None:
        self._silent = silent
        if logger is None:
            logger = structlog.get_logger("setbit").bind(sdk="setbit", **context)
        self._logger = logger

    @property
    def silent(self) -> bool:
        return self._silent

    def debug(self, event: str, **kw: Any) -> None:
        if not self._silent:
            self._logger.debug(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        if not self._silent:
            self._logger.warning(event, **kw)
