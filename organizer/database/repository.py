"""タスクリポジトリ.

永続化層でのタスクの追加・更新・取得を提供する。
SQLAlchemy のエラーは PersistenceError に変換して送出する。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from organizer.core.exceptions import PersistenceError
from organizer.database.models import TaskRecord


if TYPE_CHECKING:
    from organizer.database.session import DatabaseManager
    from organizer.state.models import Task


_logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "group_id", "owner_id", "is_complete"})


class TaskRepository:
    """タスクリポジトリ."""

    def __init__(self, db: DatabaseManager) -> None:
        """初期化.

        Args:
            db: データベースハンドル
        """
        self._db = db

    async def add_new_task(
        self,
        task_id: str,
        name: str = "",
        group_id: str | None = None,
        owner_id: str | None = None,
        is_complete: bool = False,
    ) -> TaskRecord:
        """タスクを追加.

        Raises:
            PersistenceError: 挿入に失敗した場合（ID重複を含む）
        """
        record = TaskRecord(
            id=task_id,
            name=name,
            group_id=group_id,
            owner_id=owner_id,
            is_complete=is_complete,
        )
        try:
            async with self._db.session() as session:
                session.add(record)
        except SQLAlchemyError as e:
            msg = f"タスクの追加に失敗: {task_id}"
            raise PersistenceError(msg) from e
        return record

    async def update_task(self, task_id: str, **fields: Any) -> bool:
        """タスクを部分更新.

        Args:
            task_id: タスクID
            **fields: name / group_id / owner_id / is_complete

        Returns:
            更新対象が存在したかどうか

        Raises:
            ValueError: 更新できないフィールドが指定された場合
            PersistenceError: 更新に失敗した場合
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"更新できないフィールド: {sorted(unknown)}"
            raise ValueError(msg)
        if not fields:
            return False

        try:
            async with self._db.session() as session:
                result = await session.execute(
                    update(TaskRecord).where(TaskRecord.id == task_id).values(**fields)
                )
        except SQLAlchemyError as e:
            msg = f"タスクの更新に失敗: {task_id}"
            raise PersistenceError(msg) from e
        return result.rowcount > 0

    async def get_task(self, task_id: str) -> TaskRecord | None:
        """IDでタスクを取得."""
        try:
            async with self._db.session() as session:
                return await session.get(TaskRecord, task_id)
        except SQLAlchemyError as e:
            msg = f"タスクの取得に失敗: {task_id}"
            raise PersistenceError(msg) from e

    async def save_task(self, task: Task) -> None:
        """ストア上のタスクの現在値を保存（なければ追加）."""
        try:
            async with self._db.session() as session:
                await session.merge(
                    TaskRecord(
                        id=task.id,
                        name=task.name,
                        group_id=task.group,
                        owner_id=task.owner,
                        is_complete=task.is_complete,
                    )
                )
        except SQLAlchemyError as e:
            msg = f"タスクの保存に失敗: {task.id}"
            raise PersistenceError(msg) from e
        _logger.debug("タスクを保存: %s", task.id)
