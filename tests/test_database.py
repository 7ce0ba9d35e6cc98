# -*- coding: utf-8 -*-
"""永続化層 単体テスト."""

import logging
from pathlib import Path

import pytest

from organizer.config.settings import OrganizerSettings
from organizer.core.exceptions import DatabaseConnectionError, PersistenceError
from organizer.database import (
    DatabaseConfig,
    TaskRepository,
    connect_db,
    get_dialect,
    is_sqlite,
    reset_connection,
    to_async_url,
)
from organizer.state.actions import create_task, set_task_completion, set_task_name
from organizer.state.configure import configure_store
from organizer.state.models import AppState, Task
from organizer.state.sagas import SagaMiddleware, settle, watch_task_persistence
from organizer.state.store import create_store, root_reducer


def sqlite_config(path: Path) -> DatabaseConfig:
    """一時ディレクトリ上の SQLite 設定."""
    return DatabaseConfig(url=f"sqlite+aiosqlite:///{path}")


class TestUrlUtils:
    """URL ユーティリティ テストクラス."""

    def test_to_async_url(self) -> None:
        """同期 URL が非同期ドライバに変換されること."""
        assert to_async_url("sqlite:///./organizer.db") == "sqlite+aiosqlite:///./organizer.db"
        assert to_async_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert to_async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"

    def test_dialect(self) -> None:
        """ダイアレクトを判定できること."""
        assert get_dialect("postgresql+asyncpg://h/db") == "postgresql"
        assert is_sqlite("sqlite+aiosqlite:///x.db")

    def test_invalid_url_rejected(self) -> None:
        """'://' のない URL が拒否されること."""
        with pytest.raises(ValueError):
            DatabaseConfig(url="organizer.db")


class TestConnectDb:
    """connect_db テストクラス."""

    @pytest.mark.asyncio
    async def test_handle_is_cached(self, tmp_path: Path) -> None:
        """2回目以降は同じハンドルが返ること."""
        try:
            first = await connect_db(sqlite_config(tmp_path / "organizer.db"))
            second = await connect_db()

            assert first is second
            assert first.is_initialized
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, tmp_path: Path) -> None:
        """接続失敗は例外となり、キャッシュされないこと."""
        broken = sqlite_config(tmp_path / "missing" / "organizer.db")
        try:
            with pytest.raises(DatabaseConnectionError):
                await connect_db(broken)

            db = await connect_db(sqlite_config(tmp_path / "organizer.db"))
            assert db.is_initialized
        finally:
            await reset_connection()


class TestTaskRepository:
    """TaskRepository テストクラス."""

    @pytest.mark.asyncio
    async def test_add_and_update_task(self, tmp_path: Path) -> None:
        """タスクを追加して更新できること."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))

            await repository.add_new_task("12345", name="My task")
            updated = await repository.update_task("12345", name="My task - updated")
            record = await repository.get_task("12345")

            assert updated is True
            assert record is not None
            assert record.name == "My task - updated"
            assert record.is_complete is False
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_update_missing_task(self, tmp_path: Path) -> None:
        """存在しないタスクの更新は False を返すこと."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))

            assert await repository.update_task("nope", is_complete=True) is False
            assert await repository.get_task("nope") is None
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_fields(self, tmp_path: Path) -> None:
        """更新できないフィールドが拒否されること."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))

            with pytest.raises(ValueError):
                await repository.update_task("12345", id="other")
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_duplicate_id_raises_persistence_error(self, tmp_path: Path) -> None:
        """ID重複の追加が PersistenceError になること."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))
            await repository.add_new_task("t1")

            with pytest.raises(PersistenceError):
                await repository.add_new_task("t1")
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_save_task_upserts(self, tmp_path: Path) -> None:
        """save_task が追加と上書きの両方を行うこと."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))
            task = Task(id="t1", name="Draft", group="g1", owner="u1")

            await repository.save_task(task)
            await repository.save_task(task.model_copy(update={"is_complete": True}))
            record = await repository.get_task("t1")

            assert record is not None
            assert record.to_dict() == {
                "id": "t1",
                "name": "Draft",
                "group_id": "g1",
                "owner_id": "u1",
                "is_complete": True,
            }
        finally:
            await reset_connection()


class TestWatchTaskPersistence:
    """watch_task_persistence テストクラス."""

    @pytest.mark.asyncio
    async def test_committed_and_updated_tasks_are_saved(self, tmp_path: Path) -> None:
        """確定・更新されたタスクが永続化されること."""
        try:
            repository = TaskRepository(await connect_db(sqlite_config(tmp_path / "o.db")))
            saga = SagaMiddleware()
            store = create_store(root_reducer, AppState(), [saga])
            saga.run(watch_task_persistence, repository)

            store.dispatch(create_task("t1", "g1", "u1"))
            store.dispatch(set_task_completion("t1", True))
            store.dispatch(set_task_name("t9", "missing"))
            await saga.settle()

            record = await repository.get_task("t1")
            assert record is not None
            assert record.name == "New task.. t1"
            assert record.is_complete is True
            assert await repository.get_task("t9") is None
            await store.close()
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_connects_on_first_save(self, tmp_path: Path) -> None:
        """リポジトリを渡さなくても最初の保存時に接続して永続化されること."""
        config = sqlite_config(tmp_path / "o.db")
        try:
            saga = SagaMiddleware()
            store = create_store(root_reducer, AppState(), [saga])
            saga.run(watch_task_persistence, None, config)

            store.dispatch(create_task("t1", "g1", "u1"))
            await saga.settle()

            record = await TaskRepository(await connect_db()).get_task("t1")
            assert record is not None
            assert record.owner_id == "u1"
            await store.close()
        finally:
            await reset_connection()

    @pytest.mark.asyncio
    async def test_unreachable_database_does_not_block_store(
        self,
        tmp_path: Path,
        sample_state: AppState,
        settings: OrganizerSettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """開けない DB でもストアが構築され、保存失敗はログのみで監視が続くこと."""
        caplog.set_level(logging.WARNING, logger="organizer.state.sagas")
        settings = settings.model_copy(
            update={
                "persist_task_updates": True,
                "database_url": f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'o.db'}",
            }
        )
        try:
            store = await configure_store(sample_state, settings=settings)

            store.dispatch(set_task_name("t1", "Renamed"))
            await settle(store)
            store.dispatch(set_task_completion("t1", True))
            await settle(store)

            task = store.get_state().tasks[0]
            assert task.name == "Renamed"
            assert task.is_complete is True
            skipped = [r for r in caplog.records if "永続化層に接続できない" in r.getMessage()]
            assert len(skipped) == 2
            assert "watch_task_persistence" in store.middleware[-1].watchers
            await store.close()
        finally:
            await reset_connection()
