# -*- coding: utf-8 -*-
"""エンティティリデューサー.

(現在のコレクション, アクション) → 次のコレクション を計算する純粋関数群。

設計原則:
- 例外を送出しない
- 入力を変更しない（新しい tuple を返す）
- 影響のないアクションでは入力と同一の参照を返す（変更検知を安価にする）

使用例:
    >>> from organizer.state.actions import create_task
    >>> from organizer.state.reducers import tasks_reducer
    >>>
    >>> tasks = tasks_reducer((), create_task("t1", "g1", "u1"))
    >>> tasks[0].name
    'New task.. t1'
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from organizer.state.actions import Action, ActionType
from organizer.state.models import Task


_logger = logging.getLogger(__name__)

T = TypeVar("T")

Reducer = Callable[[Any, Action], Any]

NEW_TASK_NAME_TEMPLATE = "New task.. {task_id}"


def passthrough_reducer(collection: T, action: Action) -> T:
    """変更ロジックを持たないコレクション用リデューサー.

    groups / users / comments / session は現状このリデューサーで素通りする。
    """
    return collection


def tasks_reducer(tasks: tuple[Task, ...], action: Action) -> tuple[Task, ...]:
    """タスク列リデューサー.

    Args:
        tasks: 現在のタスク列
        action: アクション

    Returns:
        次のタスク列（影響がなければ同一参照）
    """
    payload = action.payload

    if action.type == ActionType.CREATE_TASK:
        task_id = payload.get("task_id")
        group_id = payload.get("group_id")
        owner_id = payload.get("owner_id")
        if task_id is None or group_id is None or owner_id is None:
            _logger.debug("不完全な CREATE_TASK を無視: %s", payload)
            return tasks
        task = Task(
            id=str(task_id),
            name=NEW_TASK_NAME_TEMPLATE.format(task_id=task_id),
            group=str(group_id),
            owner=str(owner_id),
            is_complete=False,
        )
        return (*tasks, task)

    elif action.type == ActionType.SET_TASK_COMPLETE:
        return _update_task(
            tasks,
            payload.get("task_id"),
            is_complete=bool(payload.get("is_complete")),
        )

    elif action.type == ActionType.SET_TASK_NAME:
        name = payload.get("name")
        if name is None:
            return tasks
        return _update_task(tasks, payload.get("task_id"), name=str(name))

    elif action.type == ActionType.SET_TASK_GROUP:
        group_id = payload.get("group_id")
        if group_id is None:
            return tasks
        return _update_task(tasks, payload.get("task_id"), group=str(group_id))

    return tasks


def _update_task(
    tasks: tuple[Task, ...],
    task_id: Any,
    **changes: Any,
) -> tuple[Task, ...]:
    """ID一致のタスクのみ浅いコピーで置き換える.

    一致するタスクがなければ入力をそのまま返す（エラーにしない）。
    """
    for index, task in enumerate(tasks):
        if task.id == task_id:
            updated = task.model_copy(update=changes)
            return (*tasks[:index], updated, *tasks[index + 1 :])

    _logger.debug("対象タスクが存在しません: %s", task_id)
    return tasks


# スライス名 → リデューサー
SLICE_REDUCERS: dict[str, Reducer] = {
    "tasks": tasks_reducer,
    "groups": passthrough_reducer,
    "users": passthrough_reducer,
    "comments": passthrough_reducer,
    "session": passthrough_reducer,
}


__all__ = [
    "NEW_TASK_NAME_TEMPLATE",
    "SLICE_REDUCERS",
    "Reducer",
    "passthrough_reducer",
    "tasks_reducer",
]
