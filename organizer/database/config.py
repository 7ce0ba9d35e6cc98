"""データベース設定モデル.

使用例:
    >>> from organizer.database import DatabaseConfig
    >>> config = DatabaseConfig(url="sqlite+aiosqlite:///./organizer.db")
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """データベース接続設定.

    Attributes:
        url: SQLAlchemy 接続 URL
        echo: SQL ログ出力の有無
        pool_size: コネクションプールサイズ（SQLite 以外）
        max_overflow: プール最大オーバーフロー数
        pool_pre_ping: 接続前のヘルスチェック
        expire_on_commit: コミット後のオブジェクト失効
        connect_args: ドライバ固有の接続引数
    """

    url: str = Field(
        default="sqlite+aiosqlite:///./organizer.db",
        description="SQLAlchemy 接続 URL",
    )
    echo: bool = Field(default=False, description="SQL ログ出力")
    pool_size: int = Field(default=5, ge=1, le=100)
    max_overflow: int = Field(default=10, ge=0, le=200)
    pool_pre_ping: bool = Field(default=True)
    expire_on_commit: bool = Field(default=False)
    connect_args: dict[str, Any] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        """URL の基本バリデーション."""
        if "://" not in v:
            msg = f"無効な DB URL: {v!r}（'://' が必要）"
            raise ValueError(msg)
        return v
