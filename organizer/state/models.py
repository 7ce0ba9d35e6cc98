"""状態モデル定義.

タスク/グループ/ユーザー/コメントと、それらを束ねる集約状態を定義。

設計原則:
- 全モデルは frozen（生成後に変更しない）
- 更新は model_copy による浅いコピーで新しい値を作る
- group / owner は弱参照（参照整合性は検証しない）

使用例:
    >>> from organizer.state.models import AppState, Task
    >>>
    >>> task = Task(id="T1", name="Refactor tests", group="G1", owner="U1")
    >>> state = AppState(tasks=(task,))
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Task(BaseModel):
    """タスク.

    Attributes:
        id: タスクID
        name: タスク名
        group: 所属グループID
        owner: 所有者ユーザーID
        is_complete: 完了フラグ
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="タスクID")
    name: str = Field(..., description="タスク名")
    group: str = Field(..., description="所属グループID")
    owner: str = Field(..., description="所有者ユーザーID")
    is_complete: bool = Field(default=False, description="完了フラグ")


class Group(BaseModel):
    """グループ（タスクリスト）."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="グループID")
    name: str = Field(..., description="グループ名")
    owner: str | None = Field(None, description="所有者ユーザーID")


class User(BaseModel):
    """ユーザー."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="ユーザーID")
    name: str = Field(..., description="ユーザー名")


class Comment(BaseModel):
    """コメント."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="コメントID")
    owner: str = Field(..., description="投稿者ユーザーID")
    task: str = Field(..., description="対象タスクID")
    content: str = Field(default="", description="本文")


class AppState(BaseModel):
    """集約状態.

    ストアが保持する全コレクションのスナップショット。
    tasks は挿入順を保持する。

    Attributes:
        tasks: タスク列
        groups: グループ集合
        users: ユーザー集合
        comments: コメント集合
        session: セッション情報（不透明）
    """

    model_config = ConfigDict(frozen=True)

    tasks: tuple[Task, ...] = Field(default_factory=tuple, description="タスク列")
    groups: tuple[Group, ...] = Field(default_factory=tuple, description="グループ集合")
    users: tuple[User, ...] = Field(default_factory=tuple, description="ユーザー集合")
    comments: tuple[Comment, ...] = Field(default_factory=tuple, description="コメント集合")
    session: dict[str, Any] = Field(default_factory=dict, description="セッション情報")

    def summary(self) -> dict[str, Any]:
        """ログ用の状態要約."""
        return {
            "tasks": len(self.tasks),
            "groups": len(self.groups),
            "users": len(self.users),
            "comments": len(self.comments),
            "completed": sum(1 for task in self.tasks if task.is_complete),
        }


__all__ = [
    "AppState",
    "Comment",
    "Group",
    "Task",
    "User",
]
