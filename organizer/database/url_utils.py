"""DB URL 正規化ユーティリティ.

目的:
    永続化層は非同期ドライバで接続するため、同期ドライバの URL を
    非同期ドライバの URL に変換する。

対応ドライバ:
    - SQLite:     sqlite:// → sqlite+aiosqlite://
    - PostgreSQL: postgresql:// → postgresql+asyncpg://
"""

from __future__ import annotations


# 同期 → 非同期ドライバ変換マップ
_ASYNC_DRIVER_MAP: dict[str, str] = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}


def get_dialect(url: str) -> str:
    """URL からダイアレクト名を取得.

    Examples:
        >>> get_dialect("sqlite+aiosqlite:///./organizer.db")
        'sqlite'
    """
    scheme = url.split("://", maxsplit=1)[0] if "://" in url else url
    return scheme.split("+")[0]


def to_async_url(url: str) -> str:
    """同期 URL を非同期ドライバ URL に変換.

    Examples:
        >>> to_async_url("sqlite:///./organizer.db")
        'sqlite+aiosqlite:///./organizer.db'
    """
    scheme = url.split("://", maxsplit=1)[0] if "://" in url else ""
    if scheme in _ASYNC_DRIVER_MAP:
        new_scheme = _ASYNC_DRIVER_MAP[scheme]
        return url.replace(f"{scheme}://", f"{new_scheme}://", 1)
    return url


def is_sqlite(url: str) -> bool:
    """SQLite URL かどうか判定."""
    return get_dialect(url) == "sqlite"
