"""
テーマのアプリ全体への適用。パレットとスタイルシートをライト／ダークで切り替える。
"""
from PyQt6.QtGui import QColor, QPalette
from PyQt6.QtWidgets import QApplication

from src.ui.settings import set_theme
from src.ui.theme_colors import (
    CARD_BG_DARK,
    CARD_BG_LIGHT,
    CARD_BORDER_DARK,
    CARD_BORDER_LIGHT,
    COLOR_ACCENT,
    TEXT_BODY_DARK,
    TEXT_BODY_LIGHT,
    WINDOW_BG_DARK,
    WINDOW_BG_LIGHT,
)

_STYLESHEET = """
QMainWindow, QDialog {{ background: {window_bg}; color: {text}; }}
QTableWidget {{ background: {card_bg}; color: {text}; gridline-color: {card_border}; }}
QLineEdit, QPlainTextEdit {{ background: {card_bg}; color: {text}; border: 1px solid {card_border}; border-radius: 4px; }}
QPushButton#commitButton {{ background: {accent}; color: #ffffff; font-weight: bold; border-radius: 8px; padding: 6px 16px; }}
QLabel#heading {{ font-weight: bold; }}
"""


def load_stylesheet(theme: str) -> str:
    """テーマに応じたスタイルシート文字列を返す。"""
    dark = theme == "dark"
    return _STYLESHEET.format(
        window_bg=WINDOW_BG_DARK if dark else WINDOW_BG_LIGHT,
        card_bg=CARD_BG_DARK if dark else CARD_BG_LIGHT,
        card_border=CARD_BORDER_DARK if dark else CARD_BORDER_LIGHT,
        text=TEXT_BODY_DARK if dark else TEXT_BODY_LIGHT,
        accent=COLOR_ACCENT,
    )


def _set_palette(app: QApplication, theme: str) -> None:
    """QSS でカバーされない部分のフォールバック。"""
    palette = QPalette()
    if theme == "dark":
        palette.setColor(QPalette.ColorRole.Window, QColor(WINDOW_BG_DARK))
        palette.setColor(QPalette.ColorRole.Base, QColor(CARD_BG_DARK))
        palette.setColor(QPalette.ColorRole.Text, QColor(TEXT_BODY_DARK))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(TEXT_BODY_DARK))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(TEXT_BODY_DARK))
    else:
        palette.setColor(QPalette.ColorRole.Window, QColor(WINDOW_BG_LIGHT))
        palette.setColor(QPalette.ColorRole.Base, QColor(CARD_BG_LIGHT))
        palette.setColor(QPalette.ColorRole.Text, QColor(TEXT_BODY_LIGHT))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(TEXT_BODY_LIGHT))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(TEXT_BODY_LIGHT))
    app.setPalette(palette)


def apply_app_theme(theme: str) -> None:
    """テーマを保存し、QSS とパレットをアプリ全体に適用する。"""
    theme = theme if theme in ("light", "dark") else "light"
    set_theme(theme)
    app = QApplication.instance()
    if not app:
        return
    app.setStyleSheet(load_stylesheet(theme))
    _set_palette(app, theme)
