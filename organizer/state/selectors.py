"""状態セレクター.

状態から必要な部分を取得するセレクターを提供。
ビュー層はここで得たスライスを描画し、dispatch でのみ状態を変更する。

使用例:
    >>> from organizer.state.selectors import select, select_group_tasks
    >>>
    >>> # 単純な選択
    >>> name = select(state, "session.user_id")
    >>>
    >>> # グループ内のタスク一覧
    >>> tasks = select_group_tasks(state, "G1")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from organizer.state.models import AppState, Task


@dataclass
class StateSelector:
    """状態セレクター.

    ドット区切りのパスで状態の一部を選択。

    Attributes:
        path: 選択パス（例: "session.user_id"）
        default: デフォルト値
    """

    path: str
    default: Any = None

    def __call__(self, state: AppState | dict[str, Any]) -> Any:
        """状態から値を選択."""
        return select(state, self.path, self.default)


def select(
    state: AppState | dict[str, Any],
    path: str,
    default: Any = None,
) -> Any:
    """状態からパスで値を選択.

    辞書のキーとモデルの属性のどちらもたどる。

    Args:
        state: 状態
        path: ドット区切りのパス
        default: デフォルト値

    Returns:
        選択された値、または デフォルト値

    Example:
        >>> select({"session": {"user_id": "U1"}}, "session.user_id")
        'U1'
    """
    if not path:
        return state

    current: Any = state
    for key in path.split("."):
        if isinstance(current, dict):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, BaseModel):
            if key not in type(current).model_fields:
                return default
            current = getattr(current, key)
        else:
            return default

    return current


def select_tasks(state: AppState) -> tuple[Task, ...]:
    """タスク列を選択."""
    return state.tasks


def select_group_tasks(state: AppState, group_id: str) -> list[Task]:
    """グループに属するタスクを挿入順で選択."""
    return [task for task in state.tasks if task.group == group_id]


def select_task(state: AppState, task_id: str | None) -> Task | None:
    """IDでタスクを選択."""
    for task in state.tasks:
        if task.id == task_id:
            return task
    return None


def select_session_user_id(state: AppState) -> str | None:
    """セッション中のユーザーIDを選択."""
    return select(state, "session.user_id")


__all__ = [
    "StateSelector",
    "select",
    "select_group_tasks",
    "select_session_user_id",
    "select_task",
    "select_tasks",
]
