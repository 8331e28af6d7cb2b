"""
ファイル番号（YYMMDD_NNN）の採番。
同じ日付プレフィックスを持つ行の連番の最大値 + 1 を 3 桁ゼロ埋めで返す。
"""
import re
from collections.abc import Iterable
from datetime import date

from src.project import TakeRow


def today_prefix(today: date | None = None) -> str:
    """当日の 6 桁プレフィックス（YYMMDD）。"""
    d = today or date.today()
    return d.strftime("%y%m%d")


def next_file_no(rows: Iterable[TakeRow], today: date | None = None) -> str:
    """
    既存の行から次のファイル番号を求める。
    当日の行がなければ "<prefix>_001"。最初の "_" 以降の数字以外を除いて解釈し、解釈できない値は無視する。
    """
    prefix = today_prefix(today)
    nums: list[int] = []
    for r in rows:
        if not r.file_no or not r.file_no.startswith(prefix):
            continue
        tail = r.file_no.split("_", 1)[1] if "_" in r.file_no else ""
        digits = re.sub(r"\D", "", tail)
        if digits:
            nums.append(int(digits))
    max_n = max(nums) if nums else 0
    return f"{prefix}_{max_n + 1:03d}"
