"""
TakeLogSession の単体テスト。メモリ上のストアと固定時計で、追加・元に戻す・取り込み・プロジェクト切り替えを検証。
"""
from datetime import datetime

import pytest
from src.session import ImportStatus, TakeLogSession
from src.storage import MemoryStore, load_projects
from src.take_codec import CUT_ONLY

NOW = datetime(2025, 2, 19, 10, 0, 0)


def _clock() -> datetime:
    return NOW


class FailingStore(MemoryStore):
    """書き込みが常に失敗するストア。"""

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session(store: MemoryStore) -> TakeLogSession:
    return TakeLogSession(store, clock=_clock)


def _csv(*file_nos: str) -> str:
    lines = ["fileNo,sceneNo,cutNo,takeNo,status"]
    lines += [f'"{f}","1","1","1","OK"' for f in file_nos]
    return "\n".join(lines)


class TestStartup:
    def test_初回は無題プロジェクトを作り採番する(self, session: TakeLogSession) -> None:
        assert session.project.name == "無題プロジェクト"
        assert session.restored is False
        assert session.rows == []
        assert session.draft.file_no == "250219_001"

    def test_前回のプロジェクトを復元する(self, store: MemoryStore, session: TakeLogSession) -> None:
        session.commit()
        again = TakeLogSession(store, clock=_clock)
        assert again.restored is True
        assert again.project.id == session.project.id
        assert len(again.rows) == 1
        assert again.draft.file_no == "250219_002"


class TestCommit:
    def test_KEEPで追加するとテイクが進みファイル番号が次になる(self, session: TakeLogSession) -> None:
        result = session.commit()
        assert result.ok
        assert result.row.file_no == "250219_001"
        assert result.row.created_at == "2025-02-19T10:00:00"
        assert session.draft.take_num == 2
        assert session.draft.file_no == "250219_002"

    def test_カット1でOKを追加するとonlyになる(self, session: TakeLogSession) -> None:
        session.drafts.set_status("OK")
        session.drafts.step_take(2)
        result = session.commit()
        assert result.row.cut_no == "1"
        assert session.draft.cut_num == CUT_ONLY
        assert session.draft.take_num == 1

    def test_OKでonlyからは1へ(self, session: TakeLogSession) -> None:
        session.drafts.step_cut(-1)
        assert session.draft.cut_num == CUT_ONLY
        session.drafts.set_status("OK")
        result = session.commit()
        assert result.row.cut_no == "only"
        assert session.draft.cut_num == 1

    def test_必須項目が空なら追加しない(self, session: TakeLogSession) -> None:
        session.drafts.set_file_no("")
        result = session.commit()
        assert not result.ok
        assert result.missing == ["ファイルNo"]
        assert session.rows == []
        assert not session.history.can_undo

    def test_追加した行は保存される(self, store: MemoryStore, session: TakeLogSession) -> None:
        session.commit()
        (proj,) = load_projects(store)
        assert [r.file_no for r in proj.rows] == ["250219_001"]

    def test_入力済みのファイル番号は上書きしない(self, session: TakeLogSession) -> None:
        session.drafts.set_file_no("250219_050")
        session.refresh_file_no()
        assert session.draft.file_no == "250219_050"


class TestUndoRedo:
    def test_追加をN回戻すと元の状態になる(self, session: TakeLogSession) -> None:
        session.commit()
        session.commit()
        session.commit()
        assert len(session.rows) == 3
        for _ in range(3):
            assert session.undo()
        assert session.rows == []
        assert session.draft.take_num == 1
        assert session.draft.file_no == "250219_001"
        assert not session.undo()

    def test_redoで戻した操作をやり直す(self, session: TakeLogSession) -> None:
        session.commit()
        session.undo()
        assert session.redo()
        assert len(session.rows) == 1
        assert session.draft.take_num == 2

    def test_新しい操作でやり直しは消える(self, session: TakeLogSession) -> None:
        session.commit()
        session.undo()
        session.commit()
        assert not session.redo()

    def test_リセットも戻せる(self, session: TakeLogSession) -> None:
        session.drafts.step_scene(3)
        session.reset_counters()
        assert session.draft.scene_num == 1
        session.undo()
        assert session.draft.scene_num == 4


class TestDeleteAndEdit:
    def test_削除と元に戻す(self, session: TakeLogSession) -> None:
        row = session.commit().row
        assert session.would_delete(row.id) is row
        assert len(session.rows) == 1
        assert session.delete_row(row.id)
        assert session.rows == []
        session.undo()
        assert [r.id for r in session.rows] == [row.id]

    def test_存在しない行の削除はFalse(self, session: TakeLogSession) -> None:
        assert not session.delete_row("nope")
        assert not session.history.can_undo

    def test_編集は行を取り出してドラフトに読み込む(self, session: TakeLogSession) -> None:
        session.drafts.set_scene_suffix("b")
        session.drafts.set_note("風")
        row = session.commit().row
        assert session.edit_row(row.id)
        assert session.rows == []
        assert session.draft.file_no == row.file_no
        assert session.draft.scene_suffix == "b"
        assert session.draft.note == "風"
        session.undo()
        assert [r.id for r in session.rows] == [row.id]

    def test_絞り込み(self, session: TakeLogSession) -> None:
        session.drafts.set_note("雨")
        session.commit()
        session.drafts.set_note("")
        session.drafts.set_status("NG")
        session.commit()
        assert len(session.filtered_rows("雨")) == 1
        assert len(session.filtered_rows(status="NG")) == 1
        assert len(session.filtered_rows(status="ALL")) == 2


class TestImportExport:
    def test_CSV取り込みは現在のプロジェクトに追加する(self, session: TakeLogSession) -> None:
        result = session.import_csv(_csv("250219_007", "250219_003"))
        assert result.status is ImportStatus.OK
        assert result.count == 2
        assert [r.file_no for r in session.rows] == ["250219_003", "250219_007"]
        session.undo()
        assert session.rows == []

    def test_データ行がなければEMPTYで変更なし(self, session: TakeLogSession) -> None:
        session.commit()
        result = session.import_csv("fileNo,sceneNo")
        assert result.status is ImportStatus.EMPTY
        assert len(session.rows) == 1

    def test_読めないCSVはMALFORMEDで変更なし(self, session: TakeLogSession) -> None:
        session.commit()
        result = session.import_csv('fileNo\n"250219_001')
        assert result.status is ImportStatus.MALFORMED
        assert not result.ok
        assert len(session.rows) == 1

    def test_オブジェクトでないJSONはMALFORMEDで変更なし(self, session: TakeLogSession) -> None:
        session.commit()
        before = session.project.id
        result = session.import_json("[1, 2, 3]")
        assert result.status is ImportStatus.MALFORMED
        assert session.project.id == before
        assert len(session.rows) == 1

    def test_JSON取り込みは新しいプロジェクトとして開く(self, store: MemoryStore, session: TakeLogSession) -> None:
        session.commit()
        name, data = session.export_json()
        assert name == "無題プロジェクト.json"
        result = session.import_json(data.decode("utf-8"))
        assert result.ok
        assert result.count == 1
        assert session.project.name == "無題プロジェクト"
        assert len(load_projects(store)) == 2
        assert not session.history.can_undo

    def test_CSVエクスポート(self, session: TakeLogSession) -> None:
        session.commit()
        name, data = session.export_csv()
        assert name == "無題プロジェクト-takes.csv"
        assert data.startswith(b"\xef\xbb\xbf")
        assert b"250219_001" in data


class TestProjects:
    def test_新規作成と切り替え(self, store: MemoryStore, session: TakeLogSession) -> None:
        first = session.project
        session.commit()
        session.create_project("ロケ2")
        assert session.project.name == "ロケ2"
        assert session.rows == []
        assert session.draft.file_no == "250219_001"
        assert session.open_project(first.id)
        assert len(session.rows) == 1
        assert session.draft.file_no == "250219_002"

    def test_存在しないプロジェクトは開けない(self, session: TakeLogSession) -> None:
        assert not session.open_project("nope")

    def test_名前の変更(self, store: MemoryStore, session: TakeLogSession) -> None:
        session.rename_current("  本番  ")
        assert session.project.name == "本番"
        session.rename_current("   ")
        assert session.project.name == "本番"
        assert load_projects(store)[0].name == "本番"

    def test_複製(self, session: TakeLogSession) -> None:
        session.commit()
        orig_id = session.project.id
        copied = session.duplicate_current()
        assert copied is not None
        assert copied.id != orig_id
        assert session.project.name == "無題プロジェクト コピー"
        assert len(session.rows) == 1

    def test_最後のプロジェクトを削除すると無題が作られる(self, store: MemoryStore, session: TakeLogSession) -> None:
        old = session.project.id
        proj = session.delete_current()
        assert proj.id != old
        assert proj.name == "無題プロジェクト"
        assert [p.id for p in load_projects(store)] == [proj.id]


class TestStoreFailure:
    def test_保存に失敗しても操作は続けられる(self) -> None:
        session = TakeLogSession(FailingStore(), clock=_clock)
        assert session.commit().ok
        assert len(session.rows) == 1
        assert session.undo()
        assert session.rows == []
