"""
Field Take Log エントリポイント。
PyQt6 でメインウィンドウを表示する。
"""
import logging
import sys

from PyQt6.QtWidgets import QApplication

from src import __version__
from src.take_repository import init_collation
from src.ui.main_window import MainWindow
from src.ui.settings import get_theme
from src.ui.theme_loader import apply_app_theme


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_collation()
    app = QApplication(sys.argv)
    app.setApplicationName("Field Take Log")
    app.setApplicationVersion(__version__)
    apply_app_theme(get_theme())
    window = MainWindow()
    window.show()
    if not window.session_restored:
        window.show_project_picker()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
