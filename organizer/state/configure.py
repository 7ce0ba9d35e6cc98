"""本番構成のストア組み立て.

ルートリデューサー、デフォルト状態、固定順序のミドルウェア
（LoggerMiddleware → SagaMiddleware）を組み合わせ、ウォッチャーを起動する。

使用例:
    >>> store = await configure_store()
    >>> store.dispatch(request_task_creation("G1"))
    >>> await settle(store)
    >>> await close_store(store)
"""

from __future__ import annotations

import logging

from organizer.config.settings import OrganizerSettings, get_settings
from organizer.database.config import DatabaseConfig
from organizer.database.repository import TaskRepository
from organizer.state.default_state import default_state
from organizer.state.ids import IdAllocator, build_id_allocator
from organizer.state.middleware import LoggerMiddleware, Middleware
from organizer.state.models import AppState
from organizer.state.sagas import SagaMiddleware, watch_task_creation, watch_task_persistence
from organizer.state.store import Store, create_store, root_reducer


_logger = logging.getLogger(__name__)


async def configure_store(
    initial_state: AppState | None = None,
    *,
    settings: OrganizerSettings | None = None,
    allocator: IdAllocator | None = None,
    repository: TaskRepository | None = None,
) -> Store:
    """ストアを構築してウォッチャーを起動.

    実行中のイベントループ内で呼び出すこと。
    永続化層への接続はウォッチャーが必要になった時点で行うため、
    接続できなくてもストアの構築は失敗しない。

    Args:
        initial_state: 初期状態（省略時はデフォルト状態）
        settings: organizer 設定
        allocator: タスクID採番器（省略時は設定から作成）
        repository: タスクリポジトリ（persist_task_updates 有効時に使用）

    Returns:
        Store
    """
    settings = settings or get_settings()
    state = initial_state if initial_state is not None else default_state()

    saga = SagaMiddleware()
    middleware: list[Middleware] = []
    if settings.action_log_enabled:
        middleware.append(LoggerMiddleware())
    middleware.append(saga)

    store = create_store(root_reducer, state, middleware)

    if allocator is None:
        allocator = build_id_allocator(settings, existing=[task.id for task in state.tasks])
    saga.run(watch_task_creation, allocator, settings.default_owner_id)

    if settings.persist_task_updates:
        saga.run(
            watch_task_persistence,
            repository,
            DatabaseConfig(**settings.get_database_config()),
        )

    _logger.info("ストアを構築: watchers=%s", saga.watchers)
    return store


__all__ = ["configure_store"]
