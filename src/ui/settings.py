"""
アプリ設定の永続化。QSettings でテーマ・利き手・ウィンドウ位置等を保存する。
プロジェクト一覧の保存先（キー・バリューストア）も同じ QSettings を使う。
"""
from PyQt6.QtCore import QSettings

ORG = "FieldTakeLog"
APP = "FieldTakeLog"

HANDS = ("right", "left")


def get_settings() -> QSettings:
    return QSettings(ORG, APP)


class QSettingsStore:
    """QSettings を get/set だけのキー・バリューストアとして使う。"""

    def __init__(self, settings: QSettings | None = None) -> None:
        self._settings = settings

    def _qs(self) -> QSettings:
        return self._settings if self._settings is not None else get_settings()

    def get(self, key: str) -> str | None:
        v = self._qs().value(key, None)
        if v is None:
            return None
        return str(v)

    def set(self, key: str, value: str) -> None:
        qs = self._qs()
        qs.setValue(key, value)
        qs.sync()
        if qs.status() != QSettings.Status.NoError:
            raise OSError(f"QSettings write failed: {qs.status()}")


def get_store() -> QSettingsStore:
    return QSettingsStore()


def get_theme() -> str:
    """light / dark"""
    return get_settings().value("theme", "light", type=str)


def set_theme(theme: str) -> None:
    get_settings().setValue("theme", theme)


def get_handedness() -> str:
    """right / left。入力パネルを置く側。"""
    v = get_settings().value("field_handedness_v1", "right", type=str)
    return v if v in HANDS else "right"


def set_handedness(hand: str) -> None:
    get_settings().setValue("field_handedness_v1", hand if hand in HANDS else "right")


def get_export_last_dir() -> str:
    return get_settings().value("export_last_dir", "", type=str)


def set_export_last_dir(path: str) -> None:
    get_settings().setValue("export_last_dir", path)


def get_import_last_dir() -> str:
    return get_settings().value("import_last_dir", "", type=str)


def set_import_last_dir(path: str) -> None:
    get_settings().setValue("import_last_dir", path)


def get_main_window_geometry() -> bytes | None:
    v = get_settings().value("main_window_geometry", None)
    if v is None:
        return None
    return bytes(v)


def set_main_window_geometry(data: bytes) -> None:
    get_settings().setValue("main_window_geometry", data)
