# -*- coding: utf-8 -*-
"""状態アクション定義.

タスク/グループ/ユーザー/コメントの状態変更を表現するアクションを定義。

設計原則:
- 不変性: 状態は直接変更せず、アクションで変更
- 閉じた語彙: リリースごとにアクション種別は ActionType に列挙
- 開世界許容: 未知の種別もディスパッチ可能（全リデューサーで素通り）

使用例:
    >>> from organizer.state.actions import request_task_creation
    >>>
    >>> action = request_task_creation("G1")
    >>> action.payload
    {'group_id': 'G1'}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
import uuid


class ActionType(str, Enum):
    """アクション種別."""

    # タスク作成（要求 → 確定）
    CREATE_TASK_REQUEST = "CREATE_TASK_REQUEST"
    CREATE_TASK = "CREATE_TASK"
    CREATE_TASK_FAILED = "CREATE_TASK_FAILED"

    # タスク更新
    SET_TASK_COMPLETE = "SET_TASK_COMPLETE"
    SET_TASK_NAME = "SET_TASK_NAME"
    SET_TASK_GROUP = "SET_TASK_GROUP"


@dataclass
class Action:
    """状態変更アクション.

    Attributes:
        id: アクションID
        type: アクション種別（未知の種別は文字列のまま保持）
        payload: ペイロード
        timestamp: タイムスタンプ
        metadata: メタデータ
    """

    type: ActionType | str
    payload: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: f"action-{uuid.uuid4().hex[:8]}")
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        """種別名."""
        if isinstance(self.type, ActionType):
            return self.type.value
        return str(self.type)

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換."""
        return {
            "id": self.id,
            "type": self.type_name,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


def create_action(
    action_type: ActionType | str,
    payload: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> Action:
    """アクションを作成.

    既知の種別名は ActionType に正規化し、未知の種別名はそのまま保持する。

    Args:
        action_type: アクション種別
        payload: ペイロード
        metadata: メタデータ

    Returns:
        Action
    """
    if isinstance(action_type, str) and not isinstance(action_type, ActionType):
        try:
            action_type = ActionType(action_type)
        except ValueError:
            pass
    return Action(
        type=action_type,
        payload=payload or {},
        metadata=metadata or {},
    )


# 便利なアクション作成関数
def request_task_creation(group_id: str) -> Action:
    """タスク作成要求アクション（IDは下流で採番）."""
    return create_action(ActionType.CREATE_TASK_REQUEST, {"group_id": group_id})


def create_task(task_id: str, group_id: str, owner_id: str) -> Action:
    """タスク作成確定アクション."""
    return create_action(
        ActionType.CREATE_TASK,
        {"task_id": task_id, "group_id": group_id, "owner_id": owner_id},
    )


def create_task_failed(group_id: str, error: str) -> Action:
    """タスク作成失敗アクション."""
    return create_action(
        ActionType.CREATE_TASK_FAILED,
        {"group_id": group_id, "error": error},
    )


def set_task_completion(task_id: str, is_complete: bool) -> Action:
    """タスク完了状態を設定するアクション."""
    return create_action(
        ActionType.SET_TASK_COMPLETE,
        {"task_id": task_id, "is_complete": is_complete},
    )


def set_task_name(task_id: str, name: str) -> Action:
    """タスク名を設定するアクション."""
    return create_action(ActionType.SET_TASK_NAME, {"task_id": task_id, "name": name})


def set_task_group(task_id: str, group_id: str) -> Action:
    """タスクのグループを変更するアクション."""
    return create_action(
        ActionType.SET_TASK_GROUP,
        {"task_id": task_id, "group_id": group_id},
    )


# エクスポート
__all__ = [
    "Action",
    "ActionType",
    "create_action",
    "create_task",
    "create_task_failed",
    "request_task_creation",
    "set_task_completion",
    "set_task_group",
    "set_task_name",
]
