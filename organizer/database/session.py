"""データベースセッション管理.

目的:
    SQLAlchemy 非同期エンジン/セッションファクトリのライフサイクルを管理する。

使用例:
    >>> from organizer.database import DatabaseConfig, DatabaseManager
    >>> from organizer.database.models import Base
    >>>
    >>> db = DatabaseManager(
    ...     config=DatabaseConfig(url="sqlite+aiosqlite:///./organizer.db"),
    ...     metadata=Base.metadata,
    ... )
    >>> await db.init()
    >>> async with db.session() as session:
    ...     result = await session.execute(query)
    >>> await db.close()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from organizer.database.url_utils import is_sqlite, to_async_url


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from organizer.database.config import DatabaseConfig


_logger = logging.getLogger(__name__)


class DatabaseManager:
    """データベースセッション管理."""

    def __init__(self, config: DatabaseConfig, metadata: MetaData) -> None:
        """初期化.

        Args:
            config: データベース設定
            metadata: SQLAlchemy MetaData（Base.metadata）
        """
        self._config = config
        self._metadata = metadata

        # 内部状態
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """初期化済みかどうか."""
        return self._initialized

    @property
    def url(self) -> str:
        """非同期ドライバ対応の DB URL."""
        return to_async_url(self._config.url)

    async def init(self) -> None:
        """エンジン/セッションファクトリを初期化."""
        if self._initialized:
            return

        url = self.url
        kwargs: dict[str, Any] = {"echo": self._config.echo}
        if self._config.connect_args:
            kwargs["connect_args"] = self._config.connect_args
        if not is_sqlite(url):
            kwargs["pool_size"] = self._config.pool_size
            kwargs["max_overflow"] = self._config.max_overflow
            kwargs["pool_pre_ping"] = self._config.pool_pre_ping

        self._engine = create_async_engine(url, **kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=self._config.expire_on_commit,
        )
        self._initialized = True
        _logger.info("DatabaseManager 初期化完了: %s", url[:50])

    async def close(self) -> None:
        """接続をクローズ."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

        self._initialized = False
        _logger.info("DatabaseManager クローズ完了")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """非同期セッションを取得（コンテキストマネージャ）.

        正常終了時にコミットし、例外時はロールバックして再送出する。

        Yields:
            AsyncSession インスタンス
        """
        if not self._initialized:
            await self.init()

        if self._session_factory is None:
            msg = "セッションファクトリが未初期化"
            raise RuntimeError(msg)

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all_tables(self) -> None:
        """テーブルを作成（存在しないもののみ）."""
        if not self._initialized:
            await self.init()

        if self._engine is None:
            msg = "エンジンが未初期化"
            raise RuntimeError(msg)

        async with self._engine.begin() as conn:
            await conn.run_sync(self._metadata.create_all)
        _logger.info("テーブル作成完了")
