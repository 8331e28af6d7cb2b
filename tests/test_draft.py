"""ドラフトの編集操作と追加後の自動送りのテスト。"""
from datetime import datetime

import pytest
from src.draft import Draft, DraftController, DraftValidationError
from src.project import TakeRow
from src.take_codec import CUT_ONLY


@pytest.fixture
def ctl() -> DraftController:
    return DraftController(Draft(file_no="250219_001"))


class TestDraft:
    def test_初期値はすべて1(self) -> None:
        d = Draft()
        assert (d.scene_num, d.cut_num, d.take_num) == (1, 1, 1)
        assert d.status == "KEEP"
        assert d.mics == [""] * 8

    def test_番号トークン(self) -> None:
        d = Draft(scene_num=12, scene_suffix="b", cut_num=CUT_ONLY, cut_suffix="c", take_num=4)
        assert d.scene_no == "12b"
        assert d.cut_no == "only"
        assert d.take_no == "4"


class TestSteps:
    def test_シーンを変えるとカットとテイクが1に戻る(self, ctl: DraftController) -> None:
        ctl.draft.cut_num = 5
        ctl.draft.cut_suffix = "a"
        ctl.draft.take_num = 3
        ctl.step_scene(1)
        d = ctl.draft
        assert (d.scene_num, d.cut_num, d.cut_suffix, d.take_num) == (2, 1, "", 1)

    def test_シーンの5送り(self, ctl: DraftController) -> None:
        ctl.fast_step_scene(5)
        assert ctl.draft.scene_num == 6
        ctl.fast_step_scene(-5)
        ctl.fast_step_scene(-5)
        assert ctl.draft.scene_num == 1

    def test_カットを変えるとテイクが1に戻る(self, ctl: DraftController) -> None:
        ctl.draft.take_num = 4
        ctl.step_cut(1)
        assert ctl.draft.cut_num == 2
        assert ctl.draft.take_num == 1

    def test_カット1から減らすとonlyでサフィックスも消える(self, ctl: DraftController) -> None:
        ctl.set_cut_suffix("b")
        ctl.step_cut(-1)
        assert ctl.draft.cut_num == CUT_ONLY
        assert ctl.draft.cut_suffix == ""
        assert ctl.draft.cut_no == "only"

    def test_onlyの間はカットのサフィックスを選べない(self, ctl: DraftController) -> None:
        ctl.step_cut(-1)
        ctl.set_cut_suffix("c")
        assert ctl.draft.cut_suffix == ""

    def test_テイクは1未満にならない(self, ctl: DraftController) -> None:
        ctl.step_take(-1)
        assert ctl.draft.take_num == 1

    def test_set_status_mic_note(self, ctl: DraftController) -> None:
        ctl.set_status("ok")
        ctl.set_mic(7, "Boom")
        ctl.set_note("雨")
        assert ctl.draft.status == "OK"
        assert ctl.draft.mics[7] == "Boom"
        assert ctl.draft.note == "雨"

    def test_set_mic_範囲外はIndexError(self, ctl: DraftController) -> None:
        with pytest.raises(IndexError):
            ctl.set_mic(8, "x")


class TestBuildRow:
    def test_ドラフトから行を作る(self, ctl: DraftController) -> None:
        ctl.set_scene_suffix("a")
        ctl.set_mic(0, "Boom")
        row = ctl.build_row(datetime(2025, 2, 19, 10, 0, 0))
        assert row.id
        assert row.created_at == row.updated_at == "2025-02-19T10:00:00"
        assert (row.file_no, row.scene_no, row.cut_no, row.take_no) == ("250219_001", "1a", "1", "1")
        assert row.mics[0] == "Boom"

    def test_行のmicsはドラフトと共有しない(self, ctl: DraftController) -> None:
        row = ctl.build_row()
        ctl.set_mic(0, "changed")
        assert row.mics[0] == ""

    def test_ファイル番号が空なら拒否(self) -> None:
        ctl = DraftController(Draft(file_no=""))
        with pytest.raises(DraftValidationError) as exc:
            ctl.build_row()
        assert exc.value.missing == ["ファイルNo"]


class TestAdvanceAfterCommit:
    def test_OKでカット1はonlyになりテイク1(self, ctl: DraftController) -> None:
        ctl.draft.take_num = 3
        ctl.set_cut_suffix("a")
        ctl.advance_after_commit("OK", "250219_002")
        d = ctl.draft
        assert (d.cut_num, d.cut_suffix, d.take_num) == (CUT_ONLY, "", 1)
        assert d.cut_no == "only"
        assert d.file_no == "250219_002"

    def test_OKでカット2以上は1つ進む(self, ctl: DraftController) -> None:
        ctl.draft.cut_num = 4
        ctl.set_cut_suffix("b")
        ctl.advance_after_commit("OK", "250219_002")
        d = ctl.draft
        assert (d.cut_num, d.cut_suffix, d.take_num) == (5, "", 1)

    def test_OKでonlyからは1へ(self, ctl: DraftController) -> None:
        ctl.draft.cut_num = CUT_ONLY
        ctl.advance_after_commit("OK", "250219_002")
        assert ctl.draft.cut_num == 1
        assert ctl.draft.take_num == 1

    def test_NGはテイクだけ1増える(self, ctl: DraftController) -> None:
        ctl.draft.scene_num = 4
        ctl.draft.cut_num = 2
        ctl.draft.take_num = 3
        ctl.advance_after_commit("NG", "250219_002")
        d = ctl.draft
        assert (d.scene_num, d.cut_num, d.take_num) == (4, 2, 4)

    def test_KEEPもテイクだけ1増える(self, ctl: DraftController) -> None:
        ctl.advance_after_commit("KEEP", "250219_002")
        assert ctl.draft.take_num == 2
        assert ctl.draft.cut_num == 1


class TestResetCounters:
    def test_S_C_Tをすべて1に戻す(self, ctl: DraftController) -> None:
        ctl.draft.scene_num = 9
        ctl.draft.cut_num = CUT_ONLY
        ctl.draft.take_num = 7
        ctl.reset_counters()
        d = ctl.draft
        assert (d.scene_num, d.cut_num, d.take_num) == (1, 1, 1)


class TestFromRow:
    def test_行をドラフトに分解する(self) -> None:
        row = TakeRow(id="r1", created_at="", updated_at="", file_no="250219_003",
                      scene_no="12b", cut_no="only", take_no="4", status="NG")
        d = Draft.from_row(row)
        assert (d.scene_num, d.scene_suffix) == (12, "b")
        assert d.cut_num == CUT_ONLY
        assert d.take_num == 4
        assert d.status == "NG"

    def test_シーンのonlyは1として扱う(self) -> None:
        row = TakeRow(id="r1", created_at="", updated_at="", file_no="250219_003",
                      scene_no="only", cut_no="2", take_no="1")
        d = Draft.from_row(row)
        assert d.scene_num == 1
        assert d.scene_no == "1"
