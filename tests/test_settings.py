# -*- coding: utf-8 -*-
"""設定とログ 単体テスト."""

import json
import logging

import pytest
from pydantic import ValidationError

from organizer.config.settings import OrganizerSettings
from organizer.observability.logging import JSONFormatter, LogLevel, TextFormatter, setup_logging


class TestOrganizerSettings:
    """OrganizerSettings テストクラス."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """デフォルト値が設定されること."""
        for key in ("ORGANIZER_ID_STRATEGY", "ORGANIZER_LOG_LEVEL", "ORGANIZER_DATABASE_URL"):
            monkeypatch.delenv(key, raising=False)

        settings = OrganizerSettings(_env_file=None)

        assert settings.id_strategy == "uuid"
        assert settings.log_level is LogLevel.INFO
        assert settings.database_url == "sqlite+aiosqlite:///./organizer.db"
        assert settings.action_log_enabled is True
        assert settings.persist_task_updates is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """環境変数で上書きできること."""
        monkeypatch.setenv("ORGANIZER_ID_STRATEGY", "counter")
        monkeypatch.setenv("ORGANIZER_PERSIST_TASK_UPDATES", "true")
        monkeypatch.setenv("ORGANIZER_DEFAULT_OWNER_ID", "U7")

        settings = OrganizerSettings(_env_file=None)

        assert settings.id_strategy == "counter"
        assert settings.persist_task_updates is True
        assert settings.default_owner_id == "U7"

    def test_database_config(self) -> None:
        """永続化設定を取得できること."""
        settings = OrganizerSettings(_env_file=None, database_url="sqlite:///x.db", database_echo=True)

        assert settings.get_database_config() == {"url": "sqlite:///x.db", "echo": True}

    def test_log_level_is_normalized(self) -> None:
        """小文字のログレベルが LogLevel に変換されること."""
        settings = OrganizerSettings(_env_file=None, log_level="warning")

        assert settings.log_level is LogLevel.WARNING

    def test_invalid_log_level_rejected_on_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """不正なログレベルは設定の読み込み時に拒否されること."""
        monkeypatch.setenv("ORGANIZER_LOG_LEVEL", "verbose")

        with pytest.raises(ValidationError):
            OrganizerSettings(_env_file=None)


class TestLogging:
    """ログ設定 テストクラス."""

    def test_json_formatter_includes_extra(self) -> None:
        """extra フィールドが JSON に含まれ、機密情報がマスクされること."""
        record = logging.LogRecord(
            name="organizer.state.middleware",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="dispatch: %s",
            args=("CREATE_TASK",),
            exc_info=None,
        )
        record.action = {"type": "CREATE_TASK"}
        record.api_key = "sk-secret"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "dispatch: CREATE_TASK"
        assert data["action"] == {"type": "CREATE_TASK"}
        assert data["api_key"] == "***MASKED***"
        assert "timestamp" in data

    def test_setup_logging(self) -> None:
        """ルートロガーにハンドラーとレベルが設定されること."""
        root = logging.getLogger()
        saved_handlers = root.handlers[:]
        saved_level = root.level
        try:
            setup_logging(level=LogLevel.DEBUG, format="json")

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)

            setup_logging(level=LogLevel.WARNING, format="text")
            assert isinstance(root.handlers[0].formatter, TextFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_configure_logging_from_settings(self) -> None:
        """設定からログ設定を適用できること."""
        root = logging.getLogger()
        saved_handlers = root.handlers[:]
        saved_level = root.level
        try:
            OrganizerSettings(_env_file=None, log_level="error", log_format="json").configure_logging()

            assert root.level == logging.ERROR
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


def make_record(msg: str, **extra: object) -> logging.LogRecord:
    """extra 付きのログレコードを作成."""
    record = logging.LogRecord(
        name="organizer.state.middleware",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestActionLogFormatting:
    """アクションログの整形 テストクラス."""

    def test_text_formatter_summarizes_action(self) -> None:
        """テキスト形式でアクション種別とペイロードが末尾に付くこと."""
        record = make_record(
            "dispatch: CREATE_TASK",
            action={"type": "CREATE_TASK", "payload": {"task_id": "T5", "group_id": "G1"}},
        )

        line = TextFormatter().format(record)

        assert line.endswith("dispatch: CREATE_TASK | type=CREATE_TASK task_id=T5 group_id=G1")

    def test_text_formatter_summarizes_state(self) -> None:
        """テキスト形式で状態要約が末尾に付くこと."""
        record = make_record("next state after CREATE_TASK", state={"tasks": 5, "completed": 1})

        line = TextFormatter().format(record)

        assert line.endswith("| tasks=5 completed=1")

    def test_plain_record_is_unchanged(self) -> None:
        """extra のないレコードには何も付かないこと."""
        line = TextFormatter().format(make_record("ストアを構築"))

        assert line.endswith("organizer.state.middleware: ストアを構築")

    def test_nested_payload_secrets_are_masked(self) -> None:
        """ペイロード内の機密らしいキーも伏せられること."""
        record = make_record(
            "dispatch: LOGIN",
            action={"type": "LOGIN", "payload": {"user": "u1", "password": "hunter2"}},
        )

        data = json.loads(JSONFormatter().format(record))
        line = TextFormatter().format(record)

        assert data["action"]["payload"] == {"user": "u1", "password": "***MASKED***"}
        assert "hunter2" not in line
        assert data["logger"] == "organizer.state.middleware"
