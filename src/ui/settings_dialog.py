"""
設定ダイアログ。テーマと利き手（入力パネルの位置）を変更する。
"""
from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QVBoxLayout,
)

from src.ui.settings import get_handedness, get_theme, set_handedness
from src.ui.theme_loader import apply_app_theme

THEME_ITEMS = [("ライト", "light"), ("ダーク", "dark")]
HAND_ITEMS = [("右手（入力パネルを右）", "right"), ("左手（入力パネルを左）", "left")]


class SettingsDialog(QDialog):
    """設定画面。OK で保存し、キャンセルで破棄。"""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("設定")
        layout = QVBoxLayout(self)

        group = QGroupBox("表示")
        form = QFormLayout(group)
        self._theme_combo = QComboBox()
        for label, value in THEME_ITEMS:
            self._theme_combo.addItem(label, value)
        self._theme_combo.setCurrentIndex(max(0, self._theme_combo.findData(get_theme())))
        form.addRow("テーマ:", self._theme_combo)
        self._hand_combo = QComboBox()
        for label, value in HAND_ITEMS:
            self._hand_combo.addItem(label, value)
        self._hand_combo.setCurrentIndex(max(0, self._hand_combo.findData(get_handedness())))
        self._hand_combo.setToolTip("片手で操作しやすい側に入力パネルを置きます")
        form.addRow("利き手:", self._hand_combo)
        layout.addWidget(group)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _on_accept(self) -> None:
        set_handedness(self._hand_combo.currentData())
        apply_app_theme(self._theme_combo.currentData())
        self.accept()
