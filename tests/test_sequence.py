"""ファイル番号の採番テスト。"""
from datetime import date

from src.project import TakeRow
from src.sequence import next_file_no, today_prefix

DAY = date(2025, 2, 19)


def _row(file_no: str) -> TakeRow:
    return TakeRow(id=file_no, created_at="", updated_at="", file_no=file_no, scene_no="1", cut_no="1", take_no="1")


class TestTodayPrefix:
    def test_YYMMDD形式(self) -> None:
        assert today_prefix(DAY) == "250219"


class TestNextFileNo:
    def test_行がなければ001(self) -> None:
        assert next_file_no([], DAY) == "250219_001"

    def test_追加すると002(self) -> None:
        first = next_file_no([], DAY)
        assert next_file_no([_row(first)], DAY) == "250219_002"

    def test_当日の最大値プラス1(self) -> None:
        rows = [_row("250219_003"), _row("250219_010"), _row("250219_002")]
        assert next_file_no(rows, DAY) == "250219_011"

    def test_別の日の行は数えない(self) -> None:
        rows = [_row("250218_099"), _row("240219_050")]
        assert next_file_no(rows, DAY) == "250219_001"

    def test_数字以外は取り除いて解釈する(self) -> None:
        assert next_file_no([_row("250219_00x7")], DAY) == "250219_008"

    def test_解釈できない番号は無視する(self) -> None:
        rows = [_row("250219_abc"), _row("250219"), _row("250219_004")]
        assert next_file_no(rows, DAY) == "250219_005"

    def test_3桁を超えてもそのまま(self) -> None:
        assert next_file_no([_row("250219_999")], DAY) == "250219_1000"
