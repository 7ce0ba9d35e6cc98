# -*- coding: utf-8 -*-
"""エフェクトオーケストレーター（Saga 層）.

ディスパッチされたアクションを監視し、非同期の副作用を実行して
新たなアクションをディスパッチする長寿命ウォッチャーを管理する。

並行モデル:
- 各ウォッチャーは同一イベントループ上の asyncio タスク
- ウォッチャーが中断するのは await 地点のみ（リデューサー実行中には中断しない）
- ウォッチャーが put したアクションはパイプラインの最外周から再び流れる
- ウォッチャーの終了は監督上の異常としてログに記録する

使用例:
    >>> saga = SagaMiddleware()
    >>> store = create_store(root_reducer, default_state(), [LoggerMiddleware(), saga])
    >>> saga.run(watch_task_creation, CounterIdAllocator(), "U1")
    >>> store.dispatch(request_task_creation("G1"))
    >>> await saga.settle()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from organizer.core.exceptions import DatabaseConnectionError, IdAllocationError
from organizer.database.connection import connect_db
from organizer.database.repository import TaskRepository
from organizer.state.actions import (
    Action,
    ActionType,
    create_task,
    create_task_failed,
)
from organizer.state.channel import ActionBuffer, ActionChannel, Pattern, matcher
from organizer.state.middleware import DispatchFunc, Middleware
from organizer.state.models import AppState
from organizer.state.selectors import select_session_user_id, select_task


if TYPE_CHECKING:
    from organizer.database.config import DatabaseConfig
    from organizer.state.ids import IdAllocator
    from organizer.state.store import Store


_logger = logging.getLogger(__name__)

T = TypeVar("T")

Saga = Callable[..., Awaitable[None]]


class Effects:
    """ウォッチャーに渡されるエフェクト操作.

    Attributes:
        name: ウォッチャー名
    """

    def __init__(self, store: Store, buffer: ActionBuffer, name: str) -> None:
        """初期化.

        Args:
            store: 対象ストア
            buffer: このウォッチャー専用のバッファ
            name: ウォッチャー名
        """
        self.name = name
        self._store = store
        self._buffer = buffer

    async def take(self, pattern: Pattern = None) -> Action:
        """パターンに一致する次のアクションまで待機.

        一致しないアクションは読み捨てる。

        Args:
            pattern: アクション種別、種別の集合、または述語関数

        Returns:
            一致したアクション
        """
        matches = matcher(pattern)
        while True:
            action = await self._buffer.take()
            if matches(action):
                return action

    def put(self, action: Action) -> Action:
        """アクションをパイプラインの最外周からディスパッチ."""
        return self._store.dispatch(action)

    def select(
        self,
        selector: Callable[..., T] | None = None,
        *args: Any,
    ) -> T | AppState:
        """現在の状態（またはその一部）を取得."""
        state = self._store.get_state()
        if selector is None:
            return state
        return selector(state, *args)

    async def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """同期/非同期どちらの関数も呼び出して結果を返す."""
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result


class SagaMiddleware(Middleware):
    """エフェクト実行ミドルウェア.

    アクションを次段（リデューサー）へ転送した後でウォッチャーへ配信する。
    したがってウォッチャーが受け取る時点で、そのアクションは状態に反映済みである。
    """

    def __init__(self) -> None:
        """初期化."""
        super().__init__()
        self._channel = ActionChannel()
        self._watchers: dict[asyncio.Task[None], ActionBuffer] = {}
        self._pending: list[Action] = []
        self._depth = 0

    @property
    def watchers(self) -> list[str]:
        """稼働中のウォッチャー名."""
        return [buffer.name for buffer in self._watchers.values()]

    def handle(self, action: Action, next_: DispatchFunc) -> Action:
        """リデューサーへ転送してからウォッチャーへ配信.

        購読者の通知中に入れ子で dispatch された場合も、
        リデューサーが適用された順にウォッチャーへ配信する。
        """
        self._pending.append(action)
        self._depth += 1
        try:
            result = next_(action)
        except Exception:
            self._pending.remove(action)
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            pending, self._pending = self._pending, []
            for item in pending:
                self._channel.put(item)
        return result

    def run(self, saga: Saga, *args: Any, name: str | None = None, **kwargs: Any) -> asyncio.Task[None]:
        """ウォッチャーを起動.

        実行中のイベントループが必要。バッファは即座に登録されるため、
        起動直後にディスパッチされたアクションも取りこぼさない。

        Args:
            saga: Effects を第1引数に取る非同期関数
            *args: saga への追加引数
            name: ウォッチャー名（省略時は関数名）
            **kwargs: saga へのキーワード引数

        Returns:
            ウォッチャーのタスク
        """
        loop = asyncio.get_running_loop()
        watcher_name = name or getattr(saga, "__name__", "saga")
        buffer = self._channel.open(watcher_name)
        effects = Effects(self.store, buffer, watcher_name)

        task = loop.create_task(saga(effects, *args, **kwargs), name=f"saga:{watcher_name}")
        self._watchers[task] = buffer
        task.add_done_callback(self._on_watcher_done)
        _logger.debug("ウォッチャーを起動: %s", watcher_name)
        return task

    def _on_watcher_done(self, task: asyncio.Task[None]) -> None:
        buffer = self._watchers.pop(task, None)
        if buffer is not None:
            self._channel.remove(buffer)

        if task.cancelled():
            _logger.debug("ウォッチャーを停止: %s", task.get_name())
            return

        exc = task.exception()
        if exc is not None:
            _logger.error("ウォッチャーが異常終了: %s", task.get_name(), exc_info=exc)
        else:
            _logger.error("ウォッチャーが予期せず終了: %s", task.get_name())

    async def settle(self) -> None:
        """全ウォッチャーが次のアクション待ちに戻るまで待つ."""
        await self._channel.settle()

    async def aclose(self) -> None:
        """全ウォッチャーをキャンセル."""
        tasks = list(self._watchers)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


async def settle(store: Store) -> None:
    """ストアに組み込まれた全 SagaMiddleware が落ち着くまで待つ."""
    for item in store.middleware:
        if isinstance(item, SagaMiddleware):
            await item.settle()


MAX_ALLOCATION_ATTEMPTS = 16


async def _allocate_unused_id(effects: Effects, allocator: IdAllocator, group_id: str) -> str:
    """現在の状態に存在しないIDを採番.

    採番器は状態を知らないため、採番後に tasks スライスと照合して衝突したら採番し直す。
    照合から put までの間に await はないので、確定までに他の CREATE_TASK は割り込まない。

    Raises:
        IdAllocationError: 採番に失敗した場合、または衝突が続いた場合
    """
    for _ in range(MAX_ALLOCATION_ATTEMPTS):
        task_id = await effects.call(allocator.allocate, group_id)
        if effects.select(select_task, task_id) is None:
            return task_id
        _logger.debug("採番したIDが使用中のため再採番: %s", task_id)

    raise IdAllocationError(group_id, f"{MAX_ALLOCATION_ATTEMPTS} 回採番しても未使用のIDが得られない")


async def watch_task_creation(
    effects: Effects,
    allocator: IdAllocator,
    default_owner_id: str = "U1",
) -> None:
    """タスク作成要求ウォッチャー.

    CREATE_TASK_REQUEST ごとに新しいIDを採番し、CREATE_TASK を確定する。
    要求は到着順に1件ずつ処理され、採番に失敗した要求は
    CREATE_TASK_FAILED として報告して次の要求の待機に戻る。

    Args:
        effects: エフェクト操作
        allocator: タスクID採番器
        default_owner_id: セッションにユーザーがいない場合の所有者ID
    """
    while True:
        action = await effects.take(ActionType.CREATE_TASK_REQUEST)
        group_id = action.payload.get("group_id")
        if group_id is None:
            _logger.warning("group_id のない作成要求を無視: %s", action.id)
            continue

        owner_id = effects.select(select_session_user_id) or default_owner_id

        try:
            task_id = await _allocate_unused_id(effects, allocator, group_id)
        except IdAllocationError as e:
            _logger.warning("タスクID採番に失敗: %s", e)
            effects.put(create_task_failed(group_id, str(e)))
            continue
        except Exception as e:
            _logger.exception("タスクID採番で予期しないエラー: group=%s", group_id)
            effects.put(create_task_failed(group_id, str(e)))
            continue

        effects.put(create_task(task_id, group_id, owner_id))


_PERSISTED_TYPES = frozenset(
    {
        ActionType.CREATE_TASK,
        ActionType.SET_TASK_COMPLETE,
        ActionType.SET_TASK_NAME,
        ActionType.SET_TASK_GROUP,
    }
)


async def watch_task_persistence(
    effects: Effects,
    repository: TaskRepository | None = None,
    config: DatabaseConfig | None = None,
) -> None:
    """タスク変更を永続化層へ反映するウォッチャー.

    確定・更新されたタスクの現在値を保存する。失敗はログのみで状態は変えない。
    リポジトリが渡されない場合は、保存のたびにキャッシュされた接続ハンドルを取得する。
    接続できなければその保存だけを諦め、次のアクションの待機に戻る。

    Args:
        effects: エフェクト操作
        repository: タスクリポジトリ（省略時は config から接続）
        config: データベース設定
    """
    while True:
        action = await effects.take(_PERSISTED_TYPES)
        task = effects.select(select_task, action.payload.get("task_id"))
        if task is None:
            continue

        try:
            target = repository or TaskRepository(await connect_db(config))
        except DatabaseConnectionError as e:
            _logger.warning("永続化層に接続できないため保存を省略: %s (%s)", task.id, e)
            continue

        try:
            await target.save_task(task)
        except Exception:
            _logger.exception("タスクの永続化に失敗: %s", task.id)


__all__ = [
    "MAX_ALLOCATION_ATTEMPTS",
    "Effects",
    "Saga",
    "SagaMiddleware",
    "settle",
    "watch_task_creation",
    "watch_task_persistence",
]
