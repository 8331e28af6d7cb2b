"""
元に戻す／やり直しのスナップショット管理。
操作の直前に {行一覧, ドラフト} を丸ごとコピーして積む。新しい操作をするとやり直し側は消える。
"""
import copy
from dataclasses import dataclass

from src.draft import Draft
from src.project import TakeRow

DEFAULT_MAX_DEPTH = 100


@dataclass(frozen=True)
class Snapshot:
    """ある時点の行一覧とドラフトの複製。"""

    rows: tuple[TakeRow, ...]
    draft: Draft

    @classmethod
    def capture(cls, rows: list[TakeRow], draft: Draft) -> "Snapshot":
        return cls(rows=tuple(copy.deepcopy(rows)), draft=copy.deepcopy(draft))

    def restore(self) -> tuple[list[TakeRow], Draft]:
        """復元用に、さらに複製した行一覧とドラフトを返す（スナップショット自体は共有しない）。"""
        return copy.deepcopy(list(self.rows)), copy.deepcopy(self.draft)


class HistoryStack:
    """past / future の 2 本のスタック。"""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._past: list[Snapshot] = []
        self._future: list[Snapshot] = []
        self._max_depth = max_depth

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def record(self, rows: list[TakeRow], draft: Draft) -> None:
        """変更の直前に呼ぶ。現在の状態を past に積み、future を消す。"""
        self._past.append(Snapshot.capture(rows, draft))
        if len(self._past) > self._max_depth:
            del self._past[0]
        self._future.clear()

    def undo(self, rows: list[TakeRow], draft: Draft) -> Snapshot | None:
        """past から 1 つ戻す。現在の状態は future に積む。past が空なら None。"""
        if not self._past:
            return None
        self._future.append(Snapshot.capture(rows, draft))
        return self._past.pop()

    def redo(self, rows: list[TakeRow], draft: Draft) -> Snapshot | None:
        """future から 1 つ進める。future が空なら None。"""
        if not self._future:
            return None
        self._past.append(Snapshot.capture(rows, draft))
        return self._future.pop()

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
