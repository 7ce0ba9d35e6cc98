"""永続化ハンドルの取得.

プロセス内で1つだけのデータベースハンドルをキャッシュして返す。
最初の接続に成功するまでは何もキャッシュしないため、
接続失敗は要求単位で回復可能なエラーとして扱える。
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from organizer.core.exceptions import DatabaseConnectionError
from organizer.database.config import DatabaseConfig
from organizer.database.models import Base
from organizer.database.session import DatabaseManager


_logger = logging.getLogger(__name__)

_db: DatabaseManager | None = None


async def connect_db(config: DatabaseConfig | None = None) -> DatabaseManager:
    """データベースに接続してハンドルを返す.

    2回目以降はキャッシュ済みのハンドルを返す（config は初回のみ有効）。

    Args:
        config: データベース設定

    Returns:
        初期化済みの DatabaseManager

    Raises:
        DatabaseConnectionError: 接続またはテーブル作成に失敗した場合
    """
    global _db
    if _db is not None:
        return _db

    manager = DatabaseManager(config or DatabaseConfig(), Base.metadata)
    try:
        await manager.init()
        await manager.create_all_tables()
    except (SQLAlchemyError, OSError, ImportError) as e:
        await manager.close()
        raise DatabaseConnectionError(manager.url, str(e)) from e

    if _db is not None:
        # 並行した接続に先を越された
        await manager.close()
        return _db

    _db = manager
    _logger.info("Got db: %s", manager.url)
    return _db


async def reset_connection() -> None:
    """キャッシュ済みハンドルを閉じて破棄."""
    global _db
    manager, _db = _db, None
    if manager is not None:
        await manager.close()


__all__ = ["connect_db", "reset_connection"]
