"""organizer - タスク/プロジェクト管理のためのクライアント側状態コンテナ.

アクションで更新される正規化ストアと、タスク作成などの非同期副作用を
担う Saga 層を提供します。
"""

__version__ = "0.1.0"
