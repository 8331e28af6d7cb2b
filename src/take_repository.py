"""
現在のプロジェクトのテイク行一覧。追加・削除のたびに fileNo 昇順（ロケール順）に並べ直す。
"""
import locale
from collections.abc import Iterable, Iterator

from src.draft import Draft
from src.project import TakeRow

STATUS_FILTER_ALL = "ALL"


def init_collation() -> str:
    """
    fileNo の並び順に使う照合順序を OS のロケールに合わせる。起動時に 1 回呼ぶ。
    ロケールが使えない環境ではコードポイント順（"C"）になる。設定した名前を返す。
    """
    try:
        return locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        return locale.setlocale(locale.LC_COLLATE, "C")


def sort_key(row: TakeRow) -> str:
    return locale.strxfrm(row.file_no)


def sort_rows(rows: Iterable[TakeRow]) -> list[TakeRow]:
    """fileNo 昇順に並べた新しいリストを返す（同じ fileNo は元の順序を保つ）。"""
    return sorted(rows, key=sort_key)


def filter_rows(rows: Iterable[TakeRow], query: str = "", status: str | None = None) -> list[TakeRow]:
    """
    キーワード（大文字小文字を区別しない部分一致）と状態で絞り込む。両方を満たす行だけを返す。
    status が None または "ALL" なら状態では絞り込まない。
    """
    q = (query or "").strip().lower()
    result = []
    for r in rows:
        if status and status != STATUS_FILTER_ALL and r.status != status:
            continue
        if q and q not in " ".join(r.text_fields()).lower():
            continue
        result.append(r)
    return result


class TakeRepository:
    """テイク行の並び順つきコレクション。"""

    def __init__(self, rows: Iterable[TakeRow] = ()) -> None:
        self._rows: list[TakeRow] = sort_rows(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[TakeRow]:
        return iter(list(self._rows))

    @property
    def rows(self) -> list[TakeRow]:
        """行一覧のコピー（並び順は保証済み）。"""
        return list(self._rows)

    def get(self, row_id: str) -> TakeRow | None:
        for r in self._rows:
            if r.id == row_id:
                return r
        return None

    def add(self, row: TakeRow) -> None:
        """行を追加して並べ直す。"""
        self._rows.append(row)
        self._resort()

    def extend(self, rows: Iterable[TakeRow]) -> int:
        """複数行を既存行の後ろに追加してから並べ直す。追加件数を返す。"""
        incoming = list(rows)
        self._rows.extend(incoming)
        self._resort()
        return len(incoming)

    def would_remove(self, row_id: str) -> TakeRow | None:
        """削除対象の行を返すだけで、一覧は変更しない（確認ダイアログ用）。"""
        return self.get(row_id)

    def remove(self, row_id: str) -> bool:
        """ID の行を削除する。該当がなければ False。"""
        before = len(self._rows)
        self._rows = [r for r in self._rows if r.id != row_id]
        self._resort()
        return len(self._rows) < before

    def extract_for_edit(self, row_id: str) -> Draft | None:
        """
        行を一覧から取り出し、ドラフトの形にして返す。
        取り出した行は再度追加しない限り一覧に戻らない。
        """
        row = self.get(row_id)
        if row is None:
            return None
        self.remove(row_id)
        return Draft.from_row(row)

    def replace_all(self, rows: Iterable[TakeRow]) -> None:
        """一覧を丸ごと置き換える（元に戻す・プロジェクト切り替え）。"""
        self._rows = sort_rows(rows)

    def _resort(self) -> None:
        self._rows.sort(key=sort_key)
