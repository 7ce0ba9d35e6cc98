"""organizer 永続化モジュール.

提供機能:
    - DatabaseConfig: Pydantic ベースの DB 設定モデル
    - DatabaseManager: 非同期エンジン/セッションの管理
    - connect_db: プロセス内でキャッシュされるハンドル取得
    - TaskRepository: タスクの追加/更新/取得

使用例:
    >>> from organizer.database import DatabaseConfig, TaskRepository, connect_db
    >>>
    >>> db = await connect_db(DatabaseConfig(url="sqlite+aiosqlite:///./organizer.db"))
    >>> await TaskRepository(db).add_new_task("12345", name="My task")
"""

from organizer.database.config import DatabaseConfig
from organizer.database.connection import connect_db, reset_connection
from organizer.database.models import Base, TaskRecord
from organizer.database.repository import TaskRepository
from organizer.database.session import DatabaseManager
from organizer.database.url_utils import get_dialect, is_sqlite, to_async_url


__all__ = [
    "Base",
    "DatabaseConfig",
    "DatabaseManager",
    "TaskRecord",
    "TaskRepository",
    "connect_db",
    "get_dialect",
    "is_sqlite",
    "reset_connection",
    "to_async_url",
]
