"""デフォルト状態スナップショット.

ストア構築時に渡す静的な初期状態。
"""

from __future__ import annotations

from organizer.state.models import AppState, Comment, Group, Task, User


def default_state() -> AppState:
    """デフォルト状態を作成.

    Returns:
        ユーザー1名、グループ3件、タスク4件、コメント1件を含む AppState
    """
    return AppState(
        session={"authenticated": False, "user_id": "U1"},
        users=(User(id="U1", name="Dev"),),
        groups=(
            Group(id="G1", name="To Do", owner="U1"),
            Group(id="G2", name="Doing", owner="U1"),
            Group(id="G3", name="Done", owner="U1"),
        ),
        tasks=(
            Task(id="T1", name="Refactor tests", group="G1", owner="U1"),
            Task(id="T2", name="Meet with CTO", group="G1", owner="U1"),
            Task(id="T3", name="Compile ES6", group="G2", owner="U1"),
            Task(id="T4", name="Update package.json", group="G3", owner="U1", is_complete=True),
        ),
        comments=(Comment(id="C1", owner="U1", task="T1", content="Great work!"),),
    )


__all__ = ["default_state"]
