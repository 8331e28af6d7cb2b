"""
入力中の 1 行（ドラフト）と、追加後の自動送りルール。

追加後の送り:
- OK … そのカットは完了。カットを送り（1 → only、only → 1、2 以上は +1）、カットのサフィックスを消し、T# を 1 に戻す。
- NG / KEEP … 同じカットのリテイク。S#・C# はそのままで T# を 1 増やす。
- いずれの場合もファイル番号は追加後の一覧から採番し直す。
"""
from dataclasses import dataclass, field
from datetime import datetime

from src import take_codec
from src.project import MIC_COUNT, STATUS_KEEP, STATUS_OK, TakeRow, new_id, normalize_mics, normalize_status, now_iso
from src.take_codec import CUT_ONLY, ROLE_CUT, ROLE_SCENE, ROLE_TAKE


def _cut_after_ok(num: int) -> int:
    """OK で閉じたカットの次。1 は only に、only は 1 に、それ以外は 1 つ進める。"""
    if num == 1:
        return CUT_ONLY
    if num == CUT_ONLY:
        return 1
    return take_codec.step(ROLE_CUT, num, 1)


class DraftValidationError(ValueError):
    """必須項目（ファイルNo / S# / C# / T#）が空のまま追加しようとした。"""

    def __init__(self, missing: list[str]) -> None:
        super().__init__("必須: " + " / ".join(missing))
        self.missing = missing


@dataclass
class Draft:
    """入力中の行。S#・C# は番号とサフィックスを分けて持つ。"""

    file_no: str = ""
    scene_num: int = 1
    scene_suffix: str = ""
    cut_num: int = 1
    cut_suffix: str = ""
    take_num: int = 1
    status: str = STATUS_KEEP
    mics: list[str] = field(default_factory=lambda: [""] * MIC_COUNT)
    note: str = ""

    @property
    def scene_no(self) -> str:
        return take_codec.combine(self.scene_num, self.scene_suffix)

    @property
    def cut_no(self) -> str:
        return take_codec.combine(self.cut_num, self.cut_suffix)

    @property
    def take_no(self) -> str:
        return str(self.take_num) if self.take_num >= 1 else ""

    @classmethod
    def from_row(cls, row: TakeRow) -> "Draft":
        """行をドラフトの形に戻す（S#・C# は番号とサフィックスに分解）。"""
        scene = take_codec.parse(row.scene_no)
        if scene.is_only:
            # only はカット専用。シーンでは 1 として扱う
            scene = take_codec.Identifier(1, "")
        cut = take_codec.parse(row.cut_no)
        try:
            take_num = max(1, int(row.take_no))
        except (TypeError, ValueError):
            take_num = 1
        return cls(
            file_no=row.file_no,
            scene_num=scene.num,
            scene_suffix=scene.suffix,
            cut_num=cut.num,
            cut_suffix=cut.suffix,
            take_num=take_num,
            status=row.status,
            mics=list(row.mics),
            note=row.note,
        )


class DraftController:
    """ドラフトの編集操作と、追加（コミット）後の送りを担当する。"""

    def __init__(self, draft: Draft | None = None) -> None:
        self._draft = draft or Draft()

    @property
    def draft(self) -> Draft:
        return self._draft

    def load(self, draft: Draft) -> None:
        """ドラフトを差し替える（元に戻す・行の編集で使用）。"""
        self._draft = draft

    def set_file_no(self, file_no: str) -> None:
        self._draft.file_no = file_no.strip()

    def step_scene(self, delta: int) -> None:
        """S# を増減する。シーンが変わったら C# は 1（サフィックスなし）、T# は 1 に戻す。"""
        self._set_scene(take_codec.step(ROLE_SCENE, self._draft.scene_num, delta))

    def fast_step_scene(self, delta: int) -> None:
        """S# を ±5 する。"""
        self._set_scene(take_codec.fast_step(ROLE_SCENE, self._draft.scene_num, delta))

    def _set_scene(self, num: int) -> None:
        d = self._draft
        d.scene_num = num
        d.cut_num = 1
        d.cut_suffix = ""
        d.take_num = 1

    def step_cut(self, delta: int) -> None:
        """C# を増減する（1 ⇔ only の境界あり）。T# は 1 に戻す。"""
        d = self._draft
        d.cut_num = take_codec.step(ROLE_CUT, d.cut_num, delta)
        if d.cut_num == CUT_ONLY:
            d.cut_suffix = ""
        d.take_num = 1

    def step_take(self, delta: int) -> None:
        self._draft.take_num = take_codec.step(ROLE_TAKE, self._draft.take_num, delta)

    def set_scene_suffix(self, suffix: str) -> None:
        self._draft.scene_suffix = take_codec.effective_suffix(self._draft.scene_num, suffix)

    def set_cut_suffix(self, suffix: str) -> None:
        """only の間はサフィックスを選べない。"""
        self._draft.cut_suffix = take_codec.effective_suffix(self._draft.cut_num, suffix)

    def set_status(self, status: str) -> None:
        self._draft.status = normalize_status(status)

    def set_mic(self, index: int, label: str) -> None:
        if not 0 <= index < MIC_COUNT:
            raise IndexError(f"mic index out of range: {index}")
        self._draft.mics[index] = label

    def set_note(self, note: str) -> None:
        self._draft.note = note

    def missing_fields(self) -> list[str]:
        """空の必須項目名のリスト。"""
        d = self._draft
        missing = []
        if not d.file_no:
            missing.append("ファイルNo")
        if not d.scene_no:
            missing.append("S#")
        if not d.cut_no:
            missing.append("C#")
        if not d.take_no:
            missing.append("T#")
        return missing

    def build_row(self, now: datetime | None = None) -> TakeRow:
        """ドラフトから新しい行を作る。必須項目が空なら DraftValidationError。"""
        missing = self.missing_fields()
        if missing:
            raise DraftValidationError(missing)
        d = self._draft
        stamp = now_iso(now)
        return TakeRow(
            id=new_id(),
            created_at=stamp,
            updated_at=stamp,
            file_no=d.file_no,
            scene_no=d.scene_no,
            cut_no=d.cut_no,
            take_no=d.take_no,
            status=d.status,
            mics=normalize_mics(d.mics),
            note=d.note,
        )

    def advance_after_commit(self, status: str, next_file_no: str) -> None:
        """追加直後の送り。OK ならカットを送って T#=1、それ以外は T# を 1 増やす。"""
        d = self._draft
        if status == STATUS_OK:
            d.cut_num = _cut_after_ok(d.cut_num)
            d.cut_suffix = ""
            d.take_num = 1
        else:
            d.take_num = take_codec.step(ROLE_TAKE, d.take_num, 1)
        d.file_no = next_file_no

    def reset_counters(self) -> None:
        """S#・C#・T# をすべて 1 に戻す（only にはしない）。"""
        d = self._draft
        d.scene_num = 1
        d.cut_num = 1
        d.take_num = 1
