# -*- coding: utf-8 -*-
"""状態ストア.

Redux風の状態管理パターンを実装。
スライスごとのリデューサーを1つのルートリデューサーに合成し、
dispatch / get_state / subscribe を提供する。

設計原則:
- 単一ソース: 集約状態はストアだけが保持し、更新するのは dispatch のみ
- 不変性: 状態は直接変更せず、新しい値に置き換える
- 同期 dispatch: リデューサー実行と購読者通知は dispatch 呼び出し中に完了する
- 明示的なライフサイクル: create_store で構築、close_store で破棄

使用例:
    >>> from organizer.state.store import create_store, root_reducer
    >>> from organizer.state.default_state import default_state
    >>> from organizer.state.actions import set_task_completion
    >>>
    >>> store = create_store(root_reducer, default_state())
    >>>
    >>> # 変更を購読
    >>> unsubscribe = store.subscribe(lambda: print(store.get_state().tasks))
    >>>
    >>> # アクションをディスパッチ
    >>> store.dispatch(set_task_completion("T1", True))
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from organizer.core.exceptions import DispatchInProgressError
from organizer.state.actions import Action
from organizer.state.middleware import Middleware, compose
from organizer.state.models import AppState
from organizer.state.reducers import SLICE_REDUCERS, Reducer


_logger = logging.getLogger(__name__)

Listener = Callable[[], Any]
RootReducer = Callable[[AppState, Action], AppState]


def combine_reducers(reducers: Mapping[str, Reducer]) -> RootReducer:
    """スライスリデューサーをルートリデューサーに合成.

    マッピングに含まれないスライスは変更されずに引き継がれる。
    どのスライスも変化しなければ入力と同一の状態を返す。

    Args:
        reducers: スライス名 → リデューサー

    Returns:
        ルートリデューサー
    """

    def root_reducer(state: AppState, action: Action) -> AppState:
        changes: dict[str, Any] = {}
        for key, reducer in reducers.items():
            previous = getattr(state, key)
            current = reducer(previous, action)
            if current is not previous:
                changes[key] = current

        if not changes:
            return state
        return state.model_copy(update=changes)

    return root_reducer


root_reducer = combine_reducers(SLICE_REDUCERS)


@dataclass
class StateSubscription:
    """状態購読.

    Attributes:
        id: 購読ID
        listener: 引数なしで呼ばれるリスナー
    """

    listener: Listener
    id: str = field(default_factory=lambda: f"sub-{uuid.uuid4().hex[:8]}")


class Store:
    """状態ストア.

    主な機能:
    - 集約状態の保持
    - ミドルウェアを経由したアクションの dispatch
    - 購読者への変更通知（登録順）
    - アクション履歴と統計
    """

    def __init__(
        self,
        reducer: RootReducer,
        initial_state: AppState,
        middleware: Sequence[Middleware] | None = None,
        max_history: int = 100,
    ) -> None:
        """初期化.

        Args:
            reducer: ルートリデューサー
            initial_state: 初期状態
            middleware: 外側から順に並んだミドルウェア
            max_history: 最大履歴数
        """
        self._reducer = reducer
        self._state = initial_state
        self._subscriptions: dict[str, StateSubscription] = {}
        self._action_history: list[Action] = []
        self._max_history = max_history
        self._version = 0
        self._is_dispatching = False
        self._closed = False
        self._lock = threading.RLock()

        self._middleware = list(middleware or [])
        for item in self._middleware:
            item.setup(self)
        self._dispatch = compose(self._middleware, self._reduce)

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        """外側から順に並んだミドルウェア."""
        return tuple(self._middleware)

    @property
    def closed(self) -> bool:
        """破棄済みかどうか."""
        return self._closed

    def get_state(self) -> AppState:
        """現在の集約状態を取得.

        返される状態は不変であり、購読者はこれを変更してはならない。
        """
        return self._state

    def dispatch(self, action: Action) -> Action:
        """アクションをディスパッチ.

        ミドルウェアの最外周から処理され、最内周でリデューサーが実行される。

        Args:
            action: アクション

        Returns:
            ディスパッチされたアクション
        """
        return self._dispatch(action)

    def _reduce(self, action: Action) -> Action:
        """ルートリデューサーを実行して購読者に通知."""
        with self._lock:
            if self._is_dispatching:
                raise DispatchInProgressError(action.type_name)

            try:
                self._is_dispatching = True
                self._state = self._reducer(self._state, action)
            finally:
                self._is_dispatching = False

            self._version += 1
            self._action_history.append(action)
            if len(self._action_history) > self._max_history:
                self._action_history.pop(0)

            subscriptions = list(self._subscriptions.values())

        self._notify_subscribers(subscriptions)
        return action

    def _notify_subscribers(self, subscriptions: list[StateSubscription]) -> None:
        """購読者に通知.

        Args:
            subscriptions: dispatch 時点の購読者
        """
        for subscription in subscriptions:
            try:
                subscription.listener()
            except Exception:
                _logger.exception("購読者への通知でエラー: %s", subscription.id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """状態変更を購読.

        Args:
            listener: 引数なしのコールバック（状態は get_state() で取得する）

        Returns:
            購読解除関数
        """
        subscription = StateSubscription(listener=listener)

        with self._lock:
            self._subscriptions[subscription.id] = subscription

        def unsubscribe() -> None:
            with self._lock:
                self._subscriptions.pop(subscription.id, None)

        return unsubscribe

    def get_action_history(self, limit: int = 50) -> list[Action]:
        """アクション履歴を取得.

        Args:
            limit: 最大取得数

        Returns:
            アクションリスト
        """
        with self._lock:
            return self._action_history[-limit:]

    def get_stats(self) -> dict[str, Any]:
        """統計情報を取得.

        Returns:
            統計情報
        """
        with self._lock:
            return {
                "state_version": self._version,
                "subscription_count": len(self._subscriptions),
                "action_history_count": len(self._action_history),
                "middleware": [type(item).__name__ for item in self._middleware],
                "task_count": len(self._state.tasks),
            }

    async def close(self) -> None:
        """ミドルウェアを内側から順に閉じる."""
        if self._closed:
            return
        for item in reversed(self._middleware):
            await item.aclose()
        with self._lock:
            self._subscriptions.clear()
        self._closed = True
        _logger.info("ストアをクローズしました")


def create_store(
    reducer: RootReducer,
    initial_state: AppState,
    middleware: Sequence[Middleware] | None = None,
    max_history: int = 100,
) -> Store:
    """ストアを構築.

    Args:
        reducer: ルートリデューサー
        initial_state: 初期状態
        middleware: 外側から順に並んだミドルウェア
        max_history: 最大履歴数

    Returns:
        Store
    """
    return Store(reducer, initial_state, middleware, max_history=max_history)


async def close_store(store: Store) -> None:
    """ストアを破棄（ウォッチャーの停止を含む）."""
    await store.close()


# エクスポート
__all__ = [
    "Listener",
    "RootReducer",
    "StateSubscription",
    "Store",
    "close_store",
    "combine_reducers",
    "create_store",
    "root_reducer",
]
