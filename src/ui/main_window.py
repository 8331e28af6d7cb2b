"""
メインウィンドウ。テイク一覧と入力パネル（ファイルNo・S#/C#/T#・状態・CH1〜CH8・備考）を表示する。
記録の操作はすべて TakeLogSession に任せ、ここでは表示と確認ダイアログだけを扱う。
"""
import typing
from datetime import datetime
from pathlib import Path

from PyQt6.QtCore import QByteArray, Qt, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QColor, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from src.project import MIC_COUNT, STATUSES, Project
from src.session import ImportStatus, TakeLogSession
from src.take_codec import CUT_ONLY, FAST_STEP, SUFFIXES, combine
from src.take_repository import STATUS_FILTER_ALL
from src.ui.settings import (
    get_export_last_dir,
    get_handedness,
    get_import_last_dir,
    get_main_window_geometry,
    get_store,
    set_export_last_dir,
    set_import_last_dir,
    set_main_window_geometry,
)
from src.ui.settings_dialog import SettingsDialog
from src.ui.theme_colors import STATUS_COLORS, STEPPER_COLORS

TABLE_HEADERS = ["作成", "ファイル", "S#", "C#", "T#", "状態", *[f"CH{i + 1}" for i in range(MIC_COUNT)], "備考"]


def _format_dt(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso.replace("Z", "+00:00")).strftime("%m/%d %H:%M")
    except (ValueError, TypeError):
        return iso


class Stepper(QWidget):
    """番号の −/＋ ボタン（fast を指定すると ±5 も表示）。"""

    stepped = pyqtSignal(int)
    fastStepped = pyqtSignal(int)

    def __init__(self, label: str, variant: str, fast: int = 0, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        bg, fg = STEPPER_COLORS[variant]
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        title = QLabel(label)
        title.setObjectName("heading")
        title.setMinimumWidth(28)
        layout.addWidget(title)
        if fast:
            layout.addWidget(self._button(f"−{fast}", lambda: self.fastStepped.emit(-fast), bg, fg))
        layout.addWidget(self._button("−", lambda: self.stepped.emit(-1), bg, fg))
        self._value = QLabel("")
        self._value.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._value.setMinimumHeight(40)
        self._value.setStyleSheet(f"background: {bg}; color: {fg}; font-size: 16pt; border-radius: 8px;")
        layout.addWidget(self._value, 1)
        layout.addWidget(self._button("＋", lambda: self.stepped.emit(1), bg, fg))
        if fast:
            layout.addWidget(self._button(f"+{fast}", lambda: self.fastStepped.emit(fast), bg, fg))

    def _button(self, text: str, slot: typing.Callable[[], None], bg: str, fg: str) -> QPushButton:
        btn = QPushButton(text)
        btn.setMinimumSize(40, 40)
        btn.setStyleSheet(f"background: {bg}; color: {fg};")
        btn.clicked.connect(slot)
        return btn

    def set_value(self, text: str) -> None:
        self._value.setText(text)


class SuffixRow(QWidget):
    """サフィックス（なし, a〜g）の選択ボタン列。"""

    suffixChosen = pyqtSignal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(28, 0, 0, 0)
        self._group = QButtonGroup(self)
        self._group.setExclusive(True)
        self._buttons: dict[str, QPushButton] = {}
        for s in SUFFIXES:
            btn = QPushButton(s or "－")
            btn.setCheckable(True)
            btn.setFixedHeight(26)
            btn.clicked.connect(lambda checked=False, v=s: self.suffixChosen.emit(v))
            self._group.addButton(btn)
            self._buttons[s] = btn
            layout.addWidget(btn)
        layout.addStretch()

    def set_value(self, suffix: str, enabled: bool = True) -> None:
        btn = self._buttons.get(suffix) or self._buttons[""]
        btn.setChecked(True)
        self.setEnabled(enabled)


class ProjectPickerDialog(QDialog):
    """プロジェクト選択。ダブルクリックまたは「開く」で選んだ ID を selected_id に入れる。"""

    def __init__(self, projects: list[Project], current_id: str | None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("プロジェクトを選択")
        self.selected_id: str | None = None
        layout = QVBoxLayout(self)
        self._list = QListWidget()
        for p in projects:
            item = QListWidgetItem(f"{p.name}  （{len(p.rows)} テイク・更新 {_format_dt(p.updated_at)}）")
            item.setData(Qt.ItemDataRole.UserRole, p.id)
            self._list.addItem(item)
            if p.id == current_id:
                self._list.setCurrentItem(item)
        self._list.itemDoubleClicked.connect(lambda _item: self._on_accept())
        layout.addWidget(self._list)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Open | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)
        self.resize(420, 320)

    def _on_accept(self) -> None:
        item = self._list.currentItem()
        if item is None:
            return
        self.selected_id = item.data(Qt.ItemDataRole.UserRole)
        self.accept()


class MainWindow(QMainWindow):
    """Field Take Log のメインウィンドウ。"""

    def __init__(self, session: TakeLogSession | None = None) -> None:
        super().__init__()
        self._session = session or TakeLogSession(get_store())
        self._build_ui()
        self._setup_shortcuts()
        geo = get_main_window_geometry()
        if geo:
            self.restoreGeometry(QByteArray(geo))
        self._refresh_all()

    @property
    def session_restored(self) -> bool:
        """前回のプロジェクトを開けたか。False なら起動時にプロジェクト選択を出す。"""
        return self._session.restored

    def _build_ui(self) -> None:
        self.setMinimumSize(900, 600)
        self.resize(1280, 760)

        toolbar = QToolBar("プロジェクト")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        self._project_btn = QPushButton("")
        self._project_btn.setToolTip("プロジェクトを切り替える")
        self._project_btn.clicked.connect(self._on_pick_project)
        toolbar.addWidget(QLabel(" プロジェクト "))
        toolbar.addWidget(self._project_btn)
        for text, slot in (
            ("新規作成", self._on_new_project),
            ("名前変更", self._on_rename_project),
            ("複製", self._on_duplicate_project),
            ("JSON出力", self._on_export_json),
            ("JSON取込", self._on_import_json),
            ("削除", self._on_delete_project),
        ):
            act = QAction(text, self)
            act.triggered.connect(slot)
            toolbar.addAction(act)
        toolbar.addSeparator()
        self._act_undo = QAction("元に戻す", self)
        self._act_undo.triggered.connect(self._on_undo)
        toolbar.addAction(self._act_undo)
        self._act_redo = QAction("やり直し", self)
        self._act_redo.triggered.connect(self._on_redo)
        toolbar.addAction(self._act_redo)
        toolbar.addSeparator()
        act_settings = QAction("設定...", self)
        act_settings.triggered.connect(self._on_show_settings)
        toolbar.addAction(act_settings)

        # 一覧
        list_panel = QWidget()
        list_layout = QVBoxLayout(list_panel)
        list_layout.setContentsMargins(0, 0, 0, 0)
        filter_row = QHBoxLayout()
        self._query_edit = QLineEdit()
        self._query_edit.setPlaceholderText("キーワード検索")
        self._query_edit.textChanged.connect(lambda _t: self._refresh_table())
        filter_row.addWidget(self._query_edit, 1)
        self._status_filter = QComboBox()
        self._status_filter.addItems([STATUS_FILTER_ALL, *STATUSES])
        self._status_filter.currentIndexChanged.connect(lambda _i: self._refresh_table())
        filter_row.addWidget(self._status_filter)
        btn_csv_out = QPushButton("CSV出力")
        btn_csv_out.clicked.connect(self._on_export_csv)
        filter_row.addWidget(btn_csv_out)
        btn_csv_in = QPushButton("CSV取込")
        btn_csv_in.clicked.connect(self._on_import_csv)
        filter_row.addWidget(btn_csv_in)
        list_layout.addLayout(filter_row)
        self._table = QTableWidget(0, len(TABLE_HEADERS))
        self._table.setHorizontalHeaderLabels(TABLE_HEADERS)
        self._table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        self._table.horizontalHeader().setStretchLastSection(True)
        self._table.cellDoubleClicked.connect(lambda _r, _c: self._on_edit_selected())
        list_layout.addWidget(self._table, 1)
        row_buttons = QHBoxLayout()
        btn_edit = QPushButton("編集")
        btn_edit.setToolTip("選択した行を入力パネルに取り出す（再度「追加」するまで一覧から外れます）")
        btn_edit.clicked.connect(self._on_edit_selected)
        row_buttons.addWidget(btn_edit)
        btn_delete = QPushButton("削除")
        btn_delete.clicked.connect(self._on_delete_selected)
        row_buttons.addWidget(btn_delete)
        row_buttons.addStretch()
        self._count_label = QLabel("")
        self._count_label.setObjectName("caption")
        row_buttons.addWidget(self._count_label)
        list_layout.addLayout(row_buttons)

        # 入力パネル
        panel = QWidget()
        panel.setMinimumWidth(400)
        panel_layout = QVBoxLayout(panel)
        panel_layout.setContentsMargins(8, 0, 8, 0)
        file_label = QLabel("ファイル番号*")
        file_label.setObjectName("heading")
        panel_layout.addWidget(file_label)
        self._file_no_edit = QLineEdit()
        self._file_no_edit.textEdited.connect(self._session.drafts.set_file_no)
        panel_layout.addWidget(self._file_no_edit)

        self._scene_stepper = Stepper("S#", "scene", fast=FAST_STEP)
        self._scene_stepper.stepped.connect(lambda d: self._draft_op(self._session.drafts.step_scene, d))
        self._scene_stepper.fastStepped.connect(lambda d: self._draft_op(self._session.drafts.fast_step_scene, d))
        panel_layout.addWidget(self._scene_stepper)
        self._scene_suffix = SuffixRow()
        self._scene_suffix.suffixChosen.connect(lambda s: self._draft_op(self._session.drafts.set_scene_suffix, s))
        panel_layout.addWidget(self._scene_suffix)
        self._cut_stepper = Stepper("C#", "cut")
        self._cut_stepper.stepped.connect(lambda d: self._draft_op(self._session.drafts.step_cut, d))
        panel_layout.addWidget(self._cut_stepper)
        self._cut_suffix = SuffixRow()
        self._cut_suffix.suffixChosen.connect(lambda s: self._draft_op(self._session.drafts.set_cut_suffix, s))
        panel_layout.addWidget(self._cut_suffix)
        self._take_stepper = Stepper("T#", "take")
        self._take_stepper.stepped.connect(lambda d: self._draft_op(self._session.drafts.step_take, d))
        panel_layout.addWidget(self._take_stepper)

        status_row = QHBoxLayout()
        self._status_group = QButtonGroup(self)
        self._status_buttons: dict[str, QPushButton] = {}
        for status in STATUSES:
            btn = QPushButton(status)
            btn.setCheckable(True)
            btn.setMinimumHeight(36)
            btn.setStyleSheet(f"QPushButton:checked {{ background: {STATUS_COLORS[status]}; color: #ffffff; }}")
            btn.clicked.connect(lambda checked=False, s=status: self._draft_op(self._session.drafts.set_status, s))
            self._status_group.addButton(btn)
            self._status_buttons[status] = btn
            status_row.addWidget(btn)
        status_row.addStretch()
        btn_reset = QPushButton("リセット")
        btn_reset.setToolTip("S#・C#・T# を 1 に戻す")
        btn_reset.clicked.connect(self._on_reset_counters)
        status_row.addWidget(btn_reset)
        btn_commit = QPushButton("追加")
        btn_commit.setObjectName("commitButton")
        btn_commit.setMinimumHeight(36)
        btn_commit.setToolTip("追加（Ctrl+Enter）")
        btn_commit.clicked.connect(self._on_commit)
        status_row.addWidget(btn_commit)
        panel_layout.addLayout(status_row)

        mic_group = QGroupBox("チャンネル（CH1〜CH8）")
        mic_layout = QGridLayout(mic_group)
        self._mic_edits: list[QLineEdit] = []
        for i in range(MIC_COUNT):
            edit = QLineEdit()
            edit.setPlaceholderText(f"CH{i + 1}")
            edit.textEdited.connect(lambda text, idx=i: self._session.drafts.set_mic(idx, text))
            mic_layout.addWidget(edit, i // 2, i % 2)
            self._mic_edits.append(edit)
        panel_layout.addWidget(mic_group)
        note_label = QLabel("備考")
        note_label.setObjectName("heading")
        panel_layout.addWidget(note_label)
        self._note_edit = QPlainTextEdit()
        self._note_edit.setMaximumHeight(90)
        self._note_edit.textChanged.connect(lambda: self._session.drafts.set_note(self._note_edit.toPlainText()))
        panel_layout.addWidget(self._note_edit)
        panel_layout.addStretch()

        self._splitter = QSplitter(Qt.Orientation.Horizontal)
        self._list_panel = list_panel
        self._input_panel = panel
        self.setCentralWidget(self._splitter)
        self._apply_handedness()
        self.statusBar().showMessage("Ctrl+Enter 追加 | Ctrl+Z 元に戻す | Ctrl+Y やり直し")

    def _apply_handedness(self) -> None:
        """利き手側に入力パネルを置く。"""
        if get_handedness() == "left":
            self._splitter.insertWidget(0, self._input_panel)
            self._splitter.insertWidget(1, self._list_panel)
            self._splitter.setSizes([420, 860])
        else:
            self._splitter.insertWidget(0, self._list_panel)
            self._splitter.insertWidget(1, self._input_panel)
            self._splitter.setSizes([860, 420])

    def _setup_shortcuts(self) -> None:
        QShortcut(QKeySequence("Ctrl+Return"), self, self._on_commit)
        QShortcut(QKeySequence("Ctrl+Enter"), self, self._on_commit)
        QShortcut(QKeySequence("Ctrl+Z"), self, self._on_undo)
        QShortcut(QKeySequence("Ctrl+Shift+Z"), self, self._on_redo)
        QShortcut(QKeySequence("Ctrl+Y"), self, self._on_redo)
        QShortcut(QKeySequence(Qt.Key.Key_Delete), self._table, self._on_delete_selected)

    def closeEvent(self, event: QCloseEvent) -> None:
        set_main_window_geometry(bytes(self.saveGeometry()))
        super().closeEvent(event)

    # --- 表示の更新 ---

    def _refresh_all(self) -> None:
        self._session.refresh_file_no()
        self.setWindowTitle(f"Field Take Log - {self._session.project.name}")
        self._project_btn.setText(self._session.project.name or "未選択")
        self._refresh_table()
        self._refresh_draft_panel()

    def _refresh_table(self) -> None:
        rows = self._session.filtered_rows(self._query_edit.text(), self._status_filter.currentText())
        self._table.setRowCount(len(rows))
        for i, r in enumerate(rows):
            values = [_format_dt(r.created_at), r.file_no, r.scene_no, r.cut_no, r.take_no, r.status, *r.mics, r.note]
            for col, value in enumerate(values):
                item = QTableWidgetItem(value)
                item.setData(Qt.ItemDataRole.UserRole, r.id)
                if col == 5:
                    item.setForeground(QColor(STATUS_COLORS.get(r.status, "#000000")))
                self._table.setItem(i, col, item)
        if not rows:
            self._count_label.setText("一致するテイクはありません")
        else:
            self._count_label.setText(f"{len(rows)} / {len(self._session.rows)} テイク")
        self._act_undo.setEnabled(self._session.history.can_undo)
        self._act_redo.setEnabled(self._session.history.can_redo)

    def _refresh_draft_panel(self) -> None:
        d = self._session.draft
        if self._file_no_edit.text() != d.file_no:
            self._file_no_edit.setText(d.file_no)
        self._scene_stepper.set_value(combine(d.scene_num, d.scene_suffix))
        self._scene_suffix.set_value(d.scene_suffix)
        self._cut_stepper.set_value(combine(d.cut_num, d.cut_suffix))
        self._cut_suffix.set_value(d.cut_suffix, enabled=d.cut_num != CUT_ONLY)
        self._take_stepper.set_value(str(d.take_num))
        self._status_buttons[d.status].setChecked(True)
        for edit, label in zip(self._mic_edits, d.mics):
            if edit.text() != label:
                edit.setText(label)
        if self._note_edit.toPlainText() != d.note:
            self._note_edit.blockSignals(True)
            self._note_edit.setPlainText(d.note)
            self._note_edit.blockSignals(False)

    def _draft_op(self, op: typing.Callable[[typing.Any], None], arg: typing.Any) -> None:
        op(arg)
        self._refresh_draft_panel()

    def _selected_row_id(self) -> str | None:
        items = self._table.selectedItems()
        if not items:
            return None
        return items[0].data(Qt.ItemDataRole.UserRole)

    # --- 行の操作 ---

    def _on_commit(self) -> None:
        result = self._session.commit()
        if not result.ok:
            QMessageBox.warning(self, "追加", "必須: " + " / ".join(result.missing))
            return
        self._refresh_table()
        self._refresh_draft_panel()
        if result.row is not None:
            self.statusBar().showMessage(f"追加しました: {result.row.file_no}")

    def _on_reset_counters(self) -> None:
        self._session.reset_counters()
        self._refresh_table()
        self._refresh_draft_panel()

    def _on_edit_selected(self) -> None:
        row_id = self._selected_row_id()
        if row_id and self._session.edit_row(row_id):
            self._refresh_table()
            self._refresh_draft_panel()
            self.statusBar().showMessage("行を入力パネルに取り出しました。「追加」で一覧に戻ります。")

    def _on_delete_selected(self) -> None:
        row_id = self._selected_row_id()
        if not row_id:
            return
        row = self._session.would_delete(row_id)
        if row is None:
            return
        if not self._confirm(f"{row.file_no} を削除しますか？"):
            return
        self._session.delete_row(row_id)
        self._refresh_table()
        self._refresh_draft_panel()

    def _on_undo(self) -> None:
        if self._session.undo():
            self._refresh_table()
            self._refresh_draft_panel()

    def _on_redo(self) -> None:
        if self._session.redo():
            self._refresh_table()
            self._refresh_draft_panel()

    def _confirm(self, message: str) -> bool:
        return QMessageBox.question(
            self, "確認", message,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        ) == QMessageBox.StandardButton.Yes

    # --- インポート / エクスポート ---

    def _save_export(self, filename: str, data: bytes, file_filter: str) -> None:
        start = str(Path(get_export_last_dir() or "") / filename)
        path, _ = QFileDialog.getSaveFileName(self, "保存先を選択", start, file_filter)
        if not path:
            return
        try:
            Path(path).write_bytes(data)
        except OSError as e:
            QMessageBox.warning(self, "エラー", f"保存できませんでした: {e}")
            return
        set_export_last_dir(str(Path(path).parent))
        self.statusBar().showMessage(f"保存しました: {path}")

    def _read_import(self, file_filter: str) -> str | None:
        path, _ = QFileDialog.getOpenFileName(self, "ファイルを選択", get_import_last_dir(), file_filter)
        if not path:
            return None
        try:
            text = Path(path).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            QMessageBox.warning(self, "エラー", f"読み込めませんでした: {e}")
            return None
        set_import_last_dir(str(Path(path).parent))
        return text

    def _on_export_csv(self) -> None:
        filename, data = self._session.export_csv()
        self._save_export(filename, data, "CSV (*.csv)")

    def _on_import_csv(self) -> None:
        text = self._read_import("CSV (*.csv);;すべて (*)")
        if text is None:
            return
        result = self._session.import_csv(text)
        if result.status is ImportStatus.EMPTY:
            QMessageBox.information(self, "CSV取込", "有効な行なし")
            return
        if result.status is ImportStatus.MALFORMED:
            QMessageBox.warning(self, "CSV取込", f"CSV が不正です: {result.message}")
            return
        self._refresh_all()
        self.statusBar().showMessage(f"{result.count} 行を取り込みました")

    def _on_export_json(self) -> None:
        filename, data = self._session.export_json()
        self._save_export(filename, data, "JSON (*.json)")

    def _on_import_json(self) -> None:
        text = self._read_import("JSON (*.json);;すべて (*)")
        if text is None:
            return
        result = self._session.import_json(text)
        if not result.ok:
            QMessageBox.warning(self, "JSON取込", "JSONが不正です")
            return
        self._refresh_all()

    # --- プロジェクト ---

    def show_project_picker(self) -> None:
        dlg = ProjectPickerDialog(self._session.list_projects(), self._session.project.id, self)
        if dlg.exec() == QDialog.DialogCode.Accepted and dlg.selected_id:
            self._session.open_project(dlg.selected_id)
            self._refresh_all()

    def _on_pick_project(self) -> None:
        self.show_project_picker()

    def _on_new_project(self) -> None:
        name, ok = QInputDialog.getText(self, "新規作成", "プロジェクト名", text="新規プロジェクト")
        if not ok:
            return
        self._session.create_project(name)
        self._refresh_all()

    def _on_rename_project(self) -> None:
        name, ok = QInputDialog.getText(self, "名前変更", "新しい名前", text=self._session.project.name)
        if ok and name.strip():
            self._session.rename_current(name)
            self._refresh_all()

    def _on_duplicate_project(self) -> None:
        if self._session.duplicate_current() is not None:
            self._refresh_all()

    def _on_delete_project(self) -> None:
        name = self._session.project.name
        if not self._confirm(f"「{name}」を削除します。元に戻せません。"):
            return
        self._session.delete_current()
        self._refresh_all()

    def _on_show_settings(self) -> None:
        dlg = SettingsDialog(self)
        if dlg.exec() == QDialog.DialogCode.Accepted:
            self._apply_handedness()
