# -*- coding: utf-8 -*-
"""ミドルウェアパイプライン.

dispatch を包むアクションインターセプター群。

契約:
- ミドルウェアは handle(action, next_) を実装し、next_ を呼んで次段へ転送する
- ストア構築時に右から左へ合成され、リストの先頭が最外周になる
- 本番構成の順序は固定: LoggerMiddleware（外側） → SagaMiddleware（内側）

使用例:
    >>> from organizer.state.middleware import LoggerMiddleware
    >>> from organizer.state.store import create_store
    >>>
    >>> store = create_store(root_reducer, initial_state, [LoggerMiddleware()])
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from organizer.state.actions import Action


if TYPE_CHECKING:
    from organizer.state.store import Store


DispatchFunc = Callable[[Action], Action]


class Middleware:
    """ミドルウェア基底クラス.

    デフォルトではアクションをそのまま次段へ転送する。
    """

    def __init__(self) -> None:
        """初期化."""
        self._store: Store | None = None

    @property
    def store(self) -> Store:
        """紐付けられたストア."""
        if self._store is None:
            msg = f"{type(self).__name__} はストアに組み込まれていません"
            raise RuntimeError(msg)
        return self._store

    def setup(self, store: Store) -> None:
        """ストア構築時に呼ばれる.

        Args:
            store: このミドルウェアを組み込むストア
        """
        self._store = store

    def handle(self, action: Action, next_: DispatchFunc) -> Action:
        """アクションを処理して次段へ転送.

        Args:
            action: アクション
            next_: 次段の dispatch

        Returns:
            次段が返したアクション
        """
        return next_(action)

    async def aclose(self) -> None:
        """ストア破棄時に呼ばれる."""


class LoggerMiddleware(Middleware):
    """アクションログミドルウェア.

    入口でアクションを、出口で結果状態の要約を記録する。
    状態には一切触れず、ログ出力の失敗は握りつぶして転送を続ける。
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        level: int = logging.INFO,
    ) -> None:
        """初期化.

        Args:
            logger: 出力先ロガー
            level: ログレベル
        """
        super().__init__()
        self._logger = logger or logging.getLogger(__name__)
        self._level = level

    def handle(self, action: Action, next_: DispatchFunc) -> Action:
        """アクションと結果状態を記録."""
        self._log_action(action)
        result = next_(action)
        self._log_state(action)
        return result

    def _log_action(self, action: Action) -> None:
        with contextlib.suppress(Exception):
            self._logger.log(
                self._level,
                "dispatch: %s",
                action.type_name,
                extra={"action": action.to_dict()},
            )

    def _log_state(self, action: Action) -> None:
        with contextlib.suppress(Exception):
            state = self.store.get_state()
            self._logger.log(
                self._level,
                "next state after %s",
                action.type_name,
                extra={"state": state.summary()},
            )


def compose(middleware: list[Middleware], dispatch: DispatchFunc) -> DispatchFunc:
    """ミドルウェアを右から左へ合成.

    Args:
        middleware: 外側から順に並んだミドルウェア
        dispatch: ストア本来の dispatch

    Returns:
        最外周の dispatch
    """
    composed = dispatch
    for item in reversed(middleware):
        composed = _bind(item, composed)
    return composed


def _bind(item: Middleware, next_: DispatchFunc) -> DispatchFunc:
    def dispatch(action: Action) -> Action:
        return item.handle(action, next_)

    return dispatch


__all__ = [
    "DispatchFunc",
    "LoggerMiddleware",
    "Middleware",
    "compose",
]
