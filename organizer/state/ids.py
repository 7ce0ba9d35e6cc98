# -*- coding: utf-8 -*-
"""タスクID採番.

CREATE_TASK_REQUEST を CREATE_TASK に確定する際の新しいタスクIDを発行する。

採番方式:
- uuid: ランダムID（デフォルト）
- counter: プロセス内カウンター（既存IDをスキップ）
- database: 永続化層にプレースホルダー行を挿入して確保

同期/非同期どちらの採番器も Effects.call 経由で呼び出される。
"""

from __future__ import annotations

import itertools
import logging
import uuid
from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING, Protocol

from organizer.core.exceptions import ConfigurationError, IdAllocationError, PersistenceError
from organizer.database.config import DatabaseConfig
from organizer.database.connection import connect_db
from organizer.database.repository import TaskRepository
from organizer.state.reducers import NEW_TASK_NAME_TEMPLATE


if TYPE_CHECKING:
    from organizer.config.settings import OrganizerSettings


_logger = logging.getLogger(__name__)


class IdAllocator(Protocol):
    """タスクID採番器."""

    def allocate(self, group_id: str) -> str | Awaitable[str]:
        """新しいタスクIDを発行."""
        ...


class UuidIdAllocator:
    """ランダムIDによる採番器."""

    def __init__(self, prefix: str = "task-") -> None:
        """初期化.

        Args:
            prefix: IDプレフィックス
        """
        self._prefix = prefix

    def allocate(self, group_id: str) -> str:
        """新しいタスクIDを発行."""
        return f"{self._prefix}{uuid.uuid4().hex[:12]}"


class CounterIdAllocator:
    """プロセス内カウンターによる採番器.

    既存IDと衝突する番号は飛ばす。
    """

    def __init__(self, prefix: str = "T", start: int = 1, existing: Iterable[str] = ()) -> None:
        """初期化.

        Args:
            prefix: IDプレフィックス
            start: 開始番号
            existing: 既に使用中のID
        """
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._issued: set[str] = set(existing)

    def allocate(self, group_id: str) -> str:
        """新しいタスクIDを発行."""
        while True:
            task_id = f"{self._prefix}{next(self._counter)}"
            if task_id not in self._issued:
                self._issued.add(task_id)
                return task_id


class DatabaseIdAllocator:
    """永続化層による採番器.

    キャッシュされた接続ハンドルを取得し、プレースホルダー行を挿入してIDを確保する。
    接続や挿入の失敗は IdAllocationError として送出する。
    """

    def __init__(self, config: DatabaseConfig | None = None, prefix: str = "task-") -> None:
        """初期化.

        Args:
            config: データベース設定
            prefix: IDプレフィックス
        """
        self._config = config
        self._prefix = prefix

    async def allocate(self, group_id: str) -> str:
        """新しいタスクIDを発行."""
        task_id = f"{self._prefix}{uuid.uuid4().hex[:12]}"
        try:
            db = await connect_db(self._config)
            await TaskRepository(db).add_new_task(
                task_id,
                name=NEW_TASK_NAME_TEMPLATE.format(task_id=task_id),
                group_id=group_id,
            )
        except PersistenceError as e:
            raise IdAllocationError(group_id, str(e)) from e

        _logger.debug("永続化層でIDを確保: %s", task_id)
        return task_id


def build_id_allocator(
    settings: OrganizerSettings,
    existing: Iterable[str] = (),
) -> IdAllocator:
    """設定から採番器を作成.

    Args:
        settings: organizer 設定
        existing: 既に使用中のID（counter 方式で使用）

    Returns:
        IdAllocator

    Raises:
        ConfigurationError: 未知の採番方式の場合
    """
    strategy = settings.id_strategy.lower()
    if strategy == "uuid":
        return UuidIdAllocator()
    if strategy == "counter":
        return CounterIdAllocator(prefix=settings.id_prefix, existing=existing)
    if strategy == "database":
        return DatabaseIdAllocator(DatabaseConfig(**settings.get_database_config()))

    msg = f"未知の採番方式: {settings.id_strategy}"
    raise ConfigurationError(msg)


__all__ = [
    "CounterIdAllocator",
    "DatabaseIdAllocator",
    "IdAllocator",
    "UuidIdAllocator",
    "build_id_allocator",
]
