"""organizer 可観測性モジュール.

ストアのアクションログを構造化して出力します。

使用例:
    >>> from organizer.observability import setup_logging, LogLevel
    >>> setup_logging(level=LogLevel.DEBUG, format="json")
"""

from organizer.observability.logging import (
    JSONFormatter,
    LogLevel,
    TextFormatter,
    setup_logging,
)


__all__ = [
    "JSONFormatter",
    "LogLevel",
    "TextFormatter",
    "setup_logging",
]
