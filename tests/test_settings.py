"""
settings モジュールの単体テスト。テーマ・利き手・フォルダ・ウィンドウ位置の get/set と QSettingsStore を検証。
"""
import tempfile
from pathlib import Path
from unittest.mock import patch
import pytest
from PyQt6.QtCore import QSettings


@pytest.fixture
def temp_settings():
    """一時 INI を使う QSettings を返す。get_settings をパッチする。"""
    with tempfile.TemporaryDirectory() as tmp:
        ini = Path(tmp) / "test.ini"
        test_settings = QSettings(str(ini), QSettings.Format.IniFormat)
        with patch("src.ui.settings.get_settings", return_value=test_settings):
            yield test_settings
        test_settings.sync()


class TestTheme:
    def test_未設定はlight(self, temp_settings) -> None:
        from src.ui.settings import get_theme
        assert get_theme() == "light"

    def test_set_get_theme_往復(self, temp_settings) -> None:
        from src.ui.settings import get_theme, set_theme
        set_theme("dark")
        temp_settings.sync()
        assert get_theme() == "dark"


class TestHandedness:
    def test_未設定はright(self, temp_settings) -> None:
        from src.ui.settings import get_handedness
        assert get_handedness() == "right"

    def test_leftを保存できる(self, temp_settings) -> None:
        from src.ui.settings import get_handedness, set_handedness
        set_handedness("left")
        assert get_handedness() == "left"

    def test_不明な値はright(self, temp_settings) -> None:
        from src.ui.settings import get_handedness, set_handedness
        set_handedness("both")
        assert get_handedness() == "right"
        temp_settings.setValue("field_handedness_v1", "up")
        assert get_handedness() == "right"


class TestLastDirs:
    def test_未設定は空(self, temp_settings) -> None:
        from src.ui.settings import get_export_last_dir, get_import_last_dir
        assert get_export_last_dir() == ""
        assert get_import_last_dir() == ""

    def test_set_get_往復(self, temp_settings) -> None:
        from src.ui.settings import get_export_last_dir, get_import_last_dir, set_export_last_dir, set_import_last_dir
        set_export_last_dir("/path/to/export")
        set_import_last_dir("/path/to/import")
        temp_settings.sync()
        assert get_export_last_dir() == "/path/to/export"
        assert get_import_last_dir() == "/path/to/import"


class TestMainWindowGeometry:
    def test_get_main_window_geometry_未設定はNone(self, temp_settings) -> None:
        from src.ui.settings import get_main_window_geometry
        assert get_main_window_geometry() is None

    def test_set_get_main_window_geometry_往復(self, temp_settings) -> None:
        from src.ui.settings import get_main_window_geometry, set_main_window_geometry
        data = b"geometry_data_placeholder_123"
        set_main_window_geometry(data)
        temp_settings.sync()
        assert get_main_window_geometry() == data


class TestQSettingsStore:
    def test_未保存のキーはNone(self, temp_settings) -> None:
        from src.ui.settings import QSettingsStore
        assert QSettingsStore(temp_settings).get("missing") is None

    def test_setとgetが往復する(self, temp_settings) -> None:
        from src.ui.settings import QSettingsStore
        store = QSettingsStore(temp_settings)
        store.set("field_projects_v1", '[{"id": "p1"}]')
        assert store.get("field_projects_v1") == '[{"id": "p1"}]'

    def test_プロジェクトの保存先として使える(self, temp_settings) -> None:
        import src.storage as storage
        from src.ui.settings import get_store
        store = get_store()
        proj = storage.create_project(store, "ロケ")
        assert storage.get_current_project_id(store) == proj.id
        assert [p.name for p in storage.load_projects(store)] == ["ロケ"]
