"""タスク永続化 SQLAlchemy モデル定義."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy 宣言的ベースクラス."""


class TaskRecord(Base):
    """タスクレコード.

    主要フィールド:
        - id: タスクID（採番器が発行）
        - group_id / owner_id: 弱参照（外部キー制約なし）
    """

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    group_id: Mapped[str | None] = mapped_column(String(64), index=True)
    owner_id: Mapped[str | None] = mapped_column(String(64))
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False)

    def to_dict(self) -> dict[str, object]:
        """辞書に変換."""
        return {
            "id": self.id,
            "name": self.name,
            "group_id": self.group_id,
            "owner_id": self.owner_id,
            "is_complete": self.is_complete,
        }
