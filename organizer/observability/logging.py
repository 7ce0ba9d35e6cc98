# -*- coding: utf-8 -*-
"""ログ出力設定.

LoggerMiddleware は各 dispatch について2件のレコードを出す。
- "dispatch: <種別>"  extra={"action": Action.to_dict()}
- "next state after <種別>"  extra={"state": AppState.summary()}

ここのフォーマッターはこの2つの extra を解釈して出力する。
JSON 形式ではそのまま構造化して載せ、テキスト形式では1行の要約を末尾に付ける。
アクションのペイロードに機密らしいキーがあれば値を伏せる。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any


MASKED = "***MASKED***"

SENSITIVE_KEYS = ("password", "secret", "token", "api_key", "authorization")

# 素の LogRecord が持つ属性（これ以外が extra）
_BASE_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class LogLevel(str, Enum):
    """ログレベル."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """レコードに付加された extra を取り出す."""
    return {key: value for key, value in record.__dict__.items() if key not in _BASE_RECORD_ATTRS}


def mask_sensitive(value: Any) -> Any:
    """ネストした辞書まで辿って機密らしいキーの値を伏せる."""
    if isinstance(value, dict):
        return {
            key: MASKED if _is_sensitive(key) else mask_sensitive(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [mask_sensitive(item) for item in value]
    return value


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(word in lowered for word in SENSITIVE_KEYS)


def describe_action(action: dict[str, Any]) -> str:
    """アクション extra のテキスト要約."""
    parts = [f"type={action.get('type')}"]
    payload = action.get("payload") or {}
    parts.extend(f"{key}={value}" for key, value in mask_sensitive(payload).items())
    return " ".join(parts)


def describe_state(state: dict[str, Any]) -> str:
    """状態要約 extra のテキスト要約."""
    return " ".join(f"{key}={value}" for key, value in state.items())


class JSONFormatter(logging.Formatter):
    """JSON 形式フォーマッター.

    action / state はトップレベルのキーとして構造のまま出力する。
    """

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードを JSON 形式に変換."""
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(mask_sensitive(record_extras(record)))
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """テキスト形式フォーマッター.

    例: ``2026-01-01 12:00:00 [INFO] organizer.state.middleware: dispatch: CREATE_TASK | type=CREATE_TASK task_id=T5``
    """

    def __init__(self) -> None:
        """初期化."""
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """extra の action / state を要約して末尾に付ける."""
        line = super().format(record)
        action = getattr(record, "action", None)
        state = getattr(record, "state", None)
        if isinstance(action, dict):
            return f"{line} | {describe_action(action)}"
        if isinstance(state, dict):
            return f"{line} | {describe_state(state)}"
        return line


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "text",
    output: str = "stderr",
) -> None:
    """ルートロガーを設定.

    既存のハンドラーは置き換える。

    Args:
        level: ログレベル
        format: 出力形式（json / text）
        output: 出力先（stdout / stderr / ファイルパス）
    """
    handler: logging.Handler
    if output in ("stdout", "stderr"):
        handler = logging.StreamHandler(getattr(sys, output))
    else:
        handler = logging.FileHandler(output, encoding="utf-8")
    handler.setFormatter(JSONFormatter() if format == "json" else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.value)


__all__ = [
    "JSONFormatter",
    "LogLevel",
    "TextFormatter",
    "describe_action",
    "describe_state",
    "mask_sensitive",
    "setup_logging",
]
