# -*- coding: utf-8 -*-
"""ミドルウェアパイプライン 単体テスト."""

import logging

import pytest

from organizer.state.actions import Action, create_task, set_task_completion
from organizer.state.middleware import DispatchFunc, LoggerMiddleware, Middleware
from organizer.state.models import AppState
from organizer.state.store import create_store, root_reducer


class RecordingMiddleware(Middleware):
    """呼び出し順を記録するミドルウェア."""

    def __init__(self, name: str, calls: list[str]) -> None:
        super().__init__()
        self._name = name
        self._calls = calls

    def handle(self, action: Action, next_: DispatchFunc) -> Action:
        self._calls.append(f"{self._name}:in")
        result = next_(action)
        self._calls.append(f"{self._name}:out")
        return result


class BrokenLogger(logging.Logger):
    """常に失敗するロガー."""

    def log(self, *args, **kwargs) -> None:  # type: ignore[no-untyped-def, override]
        raise RuntimeError("logging backend down")


class TestComposition:
    """ミドルウェア合成 テストクラス."""

    def test_first_middleware_is_outermost(self, sample_state: AppState) -> None:
        """リスト先頭のミドルウェアが最外周になること."""
        calls: list[str] = []
        store = create_store(
            root_reducer,
            sample_state,
            [RecordingMiddleware("outer", calls), RecordingMiddleware("inner", calls)],
        )
        store.subscribe(lambda: calls.append("notify"))

        store.dispatch(set_task_completion("t1", True))

        assert calls == ["outer:in", "inner:in", "notify", "inner:out", "outer:out"]

    def test_dispatch_returns_action(self, sample_state: AppState) -> None:
        """dispatch がアクションを返すこと."""
        store = create_store(root_reducer, sample_state, [Middleware()])
        action = set_task_completion("t1", True)

        assert store.dispatch(action) is action

    def test_unbound_middleware_has_no_store(self) -> None:
        """ストア未組み込みのミドルウェアはストアを参照できないこと."""
        with pytest.raises(RuntimeError):
            _ = Middleware().store


class TestLoggerMiddleware:
    """LoggerMiddleware テストクラス."""

    def test_logs_action_and_next_state(
        self,
        sample_state: AppState,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """入口でアクション、出口で結果状態が記録されること."""
        store = create_store(root_reducer, sample_state, [LoggerMiddleware()])

        with caplog.at_level(logging.INFO, logger="organizer.state.middleware"):
            store.dispatch(create_task("t3", "g1", "u1"))

        records = [r for r in caplog.records if r.name == "organizer.state.middleware"]
        assert len(records) == 2
        assert records[0].action["type"] == "CREATE_TASK"
        assert records[0].action["payload"]["task_id"] == "t3"
        assert records[1].state["tasks"] == 3

    def test_logging_failure_is_swallowed(self, sample_state: AppState) -> None:
        """ログ出力の失敗が dispatch を妨げないこと."""
        logger = BrokenLogger("broken")
        store = create_store(root_reducer, sample_state, [LoggerMiddleware(logger=logger)])

        store.dispatch(set_task_completion("t1", True))

        assert store.get_state().tasks[0].is_complete is True

    def test_forwards_action_unchanged(self, sample_state: AppState) -> None:
        """アクションがそのまま次段へ渡ること."""
        seen: list[Action] = []

        class Capture(Middleware):
            def handle(self, action: Action, next_: DispatchFunc) -> Action:
                seen.append(action)
                return next_(action)

        store = create_store(root_reducer, sample_state, [LoggerMiddleware(), Capture()])
        action = set_task_completion("t1", True)

        store.dispatch(action)

        assert seen == [action]
        assert seen[0] is action
