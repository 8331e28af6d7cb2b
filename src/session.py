"""
記録シートの操作窓口。
ドラフト・テイク一覧・元に戻す履歴・保存先をまとめ、UI からはこのクラスだけを呼ぶ。

- 追加・削除・編集（行の取り出し）・カウンタのリセット・CSV 取り込みの直前に履歴を積む。
- ファイル番号の自動補完は履歴に積まない。
- 一覧が変わるたびに現在のプロジェクトを保存する（失敗しても続行）。
"""
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import src.storage as storage
from src.draft import Draft, DraftController, DraftValidationError
from src.history import HistoryStack
from src.interchange import (
    InterchangeError,
    csv_to_rows,
    encode_csv_bytes,
    encode_json_bytes,
    export_filename,
    json_to_project,
)
from src.project import Project, TakeRow
from src.sequence import next_file_no
from src.storage import KeyValueStore
from src.take_repository import TakeRepository, filter_rows

logger = logging.getLogger(__name__)


class ImportStatus(enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    MALFORMED = "malformed"


@dataclass
class ImportResult:
    status: ImportStatus
    count: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ImportStatus.OK


@dataclass
class CommitResult:
    ok: bool
    row: TakeRow | None = None
    missing: list[str] = field(default_factory=list)


class TakeLogSession:
    """1 つのプロジェクトを開いている間の記録操作。"""

    def __init__(self, store: KeyValueStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self._store = store
        self._clock = clock
        self.history = HistoryStack()
        self.drafts = DraftController()
        project, self.restored = storage.ensure_initial_project(store)
        self._project = project
        self.repository = TakeRepository(project.rows)
        storage.set_current_project_id(store, project.id)
        self.refresh_file_no()

    @property
    def project(self) -> Project:
        return self._project

    @property
    def draft(self) -> Draft:
        return self.drafts.draft

    @property
    def rows(self) -> list[TakeRow]:
        return self.repository.rows

    def refresh_file_no(self) -> None:
        """ドラフトのファイル番号が空なら採番する。入力済みの番号は上書きしない。"""
        if not self.draft.file_no:
            self.draft.file_no = next_file_no(self.repository, self._clock().date())

    def _record(self) -> None:
        self.history.record(self.repository.rows, self.draft)

    def _persist(self) -> None:
        self._project.rows = self.repository.rows
        self._project.touch(self._clock())
        storage.upsert_project(self._store, self._project)

    def _rows_changed(self) -> None:
        self._persist()
        self.refresh_file_no()

    # --- 行の操作 ---

    def commit(self) -> CommitResult:
        """ドラフトを 1 行として追加し、次の入力に向けて S#/C#/T# とファイル番号を送る。"""
        try:
            row = self.drafts.build_row(self._clock())
        except DraftValidationError as e:
            logger.info("commit rejected: missing %s", ", ".join(e.missing))
            return CommitResult(ok=False, missing=e.missing)
        self._record()
        self.repository.add(row)
        self.drafts.advance_after_commit(row.status, next_file_no(self.repository, self._clock().date()))
        self._persist()
        return CommitResult(ok=True, row=row)

    def would_delete(self, row_id: str) -> TakeRow | None:
        """削除確認用。一覧は変更しない。"""
        return self.repository.would_remove(row_id)

    def delete_row(self, row_id: str) -> bool:
        if self.repository.get(row_id) is None:
            return False
        self._record()
        self.repository.remove(row_id)
        self._rows_changed()
        return True

    def edit_row(self, row_id: str) -> bool:
        """行を一覧から取り出してドラフトに読み込む。再度「追加」するまで一覧には戻らない。"""
        if self.repository.get(row_id) is None:
            return False
        self._record()
        draft = self.repository.extract_for_edit(row_id)
        if draft is None:
            return False
        self.drafts.load(draft)
        self._persist()
        return True

    def reset_counters(self) -> None:
        self._record()
        self.drafts.reset_counters()

    def undo(self) -> bool:
        snap = self.history.undo(self.repository.rows, self.draft)
        if snap is None:
            return False
        self._restore(*snap.restore())
        return True

    def redo(self) -> bool:
        snap = self.history.redo(self.repository.rows, self.draft)
        if snap is None:
            return False
        self._restore(*snap.restore())
        return True

    def _restore(self, rows: list[TakeRow], draft: Draft) -> None:
        self.repository.replace_all(rows)
        self.drafts.load(draft)
        self._persist()

    def filtered_rows(self, query: str = "", status: str | None = None) -> list[TakeRow]:
        return filter_rows(self.repository, query, status)

    # --- インポート / エクスポート ---

    def export_csv(self) -> tuple[str, bytes]:
        """(ファイル名, BOM 付き CSV) を返す。"""
        return export_filename(self._project.name, "csv"), encode_csv_bytes(self.repository.rows)

    def export_json(self) -> tuple[str, bytes]:
        self._project.rows = self.repository.rows
        return export_filename(self._project.name, "json"), encode_json_bytes(self._project)

    def import_csv(self, text: str) -> ImportResult:
        """CSV の行を現在のプロジェクトに追加する。読めない・空のときは一覧を変更しない。"""
        try:
            incoming = csv_to_rows(text, self._clock())
        except InterchangeError as e:
            logger.warning("CSV import failed: %s", e)
            return ImportResult(ImportStatus.MALFORMED, message=str(e))
        if not incoming:
            return ImportResult(ImportStatus.EMPTY, message="有効な行なし")
        self._record()
        count = self.repository.extend(incoming)
        self._rows_changed()
        logger.info("CSV import: %d rows into %s", count, self._project.name)
        return ImportResult(ImportStatus.OK, count=count)

    def import_json(self, text: str) -> ImportResult:
        """JSON を新しいプロジェクトとして取り込み、そのプロジェクトを開く。"""
        try:
            project = json_to_project(text, self._clock())
        except InterchangeError as e:
            logger.warning("JSON import failed: %s", e)
            return ImportResult(ImportStatus.MALFORMED, message=str(e))
        storage.insert_project(self._store, project)
        self._switch_to(project)
        return ImportResult(ImportStatus.OK, count=len(project.rows))

    # --- プロジェクト ---

    def list_projects(self) -> list[Project]:
        return storage.load_projects(self._store)

    def open_project(self, project_id: str) -> bool:
        proj = storage.get_project(self._store, project_id)
        if proj is None:
            return False
        storage.set_current_project_id(self._store, proj.id)
        self._switch_to(proj)
        return True

    def create_project(self, name: str = "") -> Project:
        proj = storage.create_project(self._store, name)
        self._switch_to(proj)
        return proj

    def rename_current(self, name: str) -> None:
        if not name.strip():
            return
        self._project.name = name.strip()
        self._persist()

    def duplicate_current(self) -> Project | None:
        self._persist()
        proj = storage.duplicate_project(self._store, self._project.id)
        if proj is not None:
            self._switch_to(proj)
        return proj

    def delete_current(self) -> Project:
        """現在のプロジェクトを削除し、残りの先頭（なければ新しい無題プロジェクト）を開く。"""
        proj = storage.delete_project(self._store, self._project.id)
        self._switch_to(proj)
        return proj

    def _switch_to(self, project: Project) -> None:
        self._project = project
        self.repository.replace_all(project.rows)
        self.history.clear()
        self.drafts.set_file_no("")
        self.refresh_file_no()
