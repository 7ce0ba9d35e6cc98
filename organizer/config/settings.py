# -*- coding: utf-8 -*-
"""organizer 設定.

このモジュールは、状態ストアと周辺コンポーネントの設定を管理します。

使用例:
    ```python
    from organizer.config import get_settings

    settings = get_settings()
    print(settings.id_strategy)  # "uuid"
    print(settings.database_url)  # "sqlite+aiosqlite:///./organizer.db"
    ```

環境変数:
    - ORGANIZER_LOG_LEVEL: ログレベル（DEBUG/INFO/WARNING/ERROR）
    - ORGANIZER_LOG_FORMAT: ログ形式（text/json）
    - ORGANIZER_ID_STRATEGY: タスクID採番方式（uuid/counter/database）
    - ORGANIZER_ID_PREFIX: counter 方式のIDプレフィックス
    - ORGANIZER_DATABASE_URL: 永続化層の接続 URL
    - ORGANIZER_DEFAULT_OWNER_ID: セッションにユーザーがいない場合の所有者ID
    - ORGANIZER_PERSIST_TASK_UPDATES: タスク更新を永続化層へ反映するか
"""

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from organizer.observability.logging import LogLevel, setup_logging


class OrganizerSettings(BaseSettings):
    """organizer 設定.

    環境変数または.envファイルから設定を読み込みます。

    Attributes:
        log_level: ログレベル
        log_format: ログ出力形式
        action_log_enabled: アクションログミドルウェアを有効化
        id_strategy: タスクID採番方式
        id_prefix: counter 方式のIDプレフィックス
        database_url: 永続化層の接続 URL
        database_echo: SQL ログ出力
        default_owner_id: デフォルト所有者ID
        persist_task_updates: タスク更新の永続化
    """

    # ログ設定
    log_level: LogLevel = Field(default=LogLevel.INFO, description="ログレベル")
    log_format: Literal["text", "json"] = Field(default="text", description="ログ出力形式")
    action_log_enabled: bool = Field(default=True, description="アクションログを有効化")

    # 採番設定
    id_strategy: str = Field(
        default="uuid",
        description="タスクID採番方式（uuid/counter/database）",
    )
    id_prefix: str = Field(default="T", min_length=1, description="IDプレフィックス")

    # 永続化設定
    database_url: str = Field(
        default="sqlite+aiosqlite:///./organizer.db",
        description="永続化層の接続 URL",
    )
    database_echo: bool = Field(default=False, description="SQL ログ出力")
    persist_task_updates: bool = Field(default=False, description="タスク更新の永続化")

    # セッション設定
    default_owner_id: str = Field(default="U1", description="デフォルト所有者ID")

    # Pydantic設定
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ORGANIZER_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        """小文字のレベル名も受け付ける."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def configure_logging(self) -> None:
        """ログ設定を適用."""
        setup_logging(
            level=self.log_level,
            format=self.log_format,
        )

    def get_database_config(self) -> dict[str, Any]:
        """永続化設定を取得.

        Returns:
            DatabaseConfig に渡せる設定辞書
        """
        return {
            "url": self.database_url,
            "echo": self.database_echo,
        }


@lru_cache
def get_settings() -> OrganizerSettings:
    """設定シングルトンを取得.

    この関数は設定をキャッシュし、アプリケーション全体で同じインスタンスを返します。

    Returns:
        organizer 設定
    """
    settings = OrganizerSettings()
    settings.configure_logging()
    return settings
