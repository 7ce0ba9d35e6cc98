"""設定管理モジュール.

このモジュールは、organizer ストアの設定管理を提供します。
"""

from organizer.config.settings import OrganizerSettings, get_settings


__all__ = ["OrganizerSettings", "get_settings"]
