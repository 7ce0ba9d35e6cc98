"""状態管理層.

Redux風の状態管理パターンを提供。

モジュール:
- actions: 状態アクション
- models: 状態モデル
- reducers: エンティティリデューサー
- store: 状態ストア
- middleware: ミドルウェアパイプライン
- sagas: エフェクトオーケストレーター
- selectors: 状態セレクター
"""

from organizer.state.actions import (
    Action,
    ActionType,
    create_action,
    create_task,
    create_task_failed,
    request_task_creation,
    set_task_completion,
    set_task_group,
    set_task_name,
)
from organizer.state.configure import configure_store
from organizer.state.default_state import default_state
from organizer.state.ids import (
    CounterIdAllocator,
    DatabaseIdAllocator,
    IdAllocator,
    UuidIdAllocator,
)
from organizer.state.middleware import LoggerMiddleware, Middleware
from organizer.state.models import AppState, Comment, Group, Task, User
from organizer.state.reducers import passthrough_reducer, tasks_reducer
from organizer.state.sagas import (
    Effects,
    SagaMiddleware,
    settle,
    watch_task_creation,
    watch_task_persistence,
)
from organizer.state.selectors import (
    StateSelector,
    select,
    select_group_tasks,
)
from organizer.state.store import (
    Store,
    close_store,
    combine_reducers,
    create_store,
    root_reducer,
)


__all__ = [
    # Actions
    "Action",
    "ActionType",
    "create_action",
    "create_task",
    "create_task_failed",
    "request_task_creation",
    "set_task_completion",
    "set_task_group",
    "set_task_name",
    # Models
    "AppState",
    "Comment",
    "Group",
    "Task",
    "User",
    "default_state",
    # Reducers
    "combine_reducers",
    "passthrough_reducer",
    "root_reducer",
    "tasks_reducer",
    # Store
    "Store",
    "close_store",
    "configure_store",
    "create_store",
    # Middleware / Sagas
    "CounterIdAllocator",
    "DatabaseIdAllocator",
    "Effects",
    "IdAllocator",
    "LoggerMiddleware",
    "Middleware",
    "SagaMiddleware",
    "UuidIdAllocator",
    "settle",
    "watch_task_creation",
    "watch_task_persistence",
    # Selectors
    "StateSelector",
    "select",
    "select_group_tasks",
]
