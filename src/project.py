"""
プロジェクト・テイク行のデータモデル。
辞書との相互変換は JSON 保存・インポート／エクスポートと同じキー名（createdAt, fileNo …）を使う。
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime

STATUS_OK = "OK"
STATUS_NG = "NG"
STATUS_KEEP = "KEEP"
STATUSES: tuple[str, ...] = (STATUS_OK, STATUS_NG, STATUS_KEEP)

MIC_COUNT = 8


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso(now: datetime | None = None) -> str:
    """保存用の時刻文字列（秒まで）。"""
    return (now or datetime.now()).isoformat(timespec="seconds")


def normalize_status(value: object) -> str:
    """OK/NG/KEEP 以外は KEEP にする。"""
    s = str(value or "").strip().upper()
    return s if s in STATUSES else STATUS_KEEP


def normalize_mics(mics: object) -> list[str]:
    """マイク一覧を 8 要素の文字列リストにそろえる（不足は空文字、超過は切り捨て）。"""
    items = [str(m) if m is not None else "" for m in mics] if isinstance(mics, (list, tuple)) else []
    return (items + [""] * MIC_COUNT)[:MIC_COUNT]


@dataclass
class TakeRow:
    """1テイク分の記録。"""

    id: str
    created_at: str
    updated_at: str
    file_no: str
    scene_no: str
    cut_no: str
    take_no: str
    status: str = STATUS_KEEP
    mics: list[str] = field(default_factory=lambda: [""] * MIC_COUNT)
    note: str = ""

    def __post_init__(self) -> None:
        self.status = normalize_status(self.status)
        self.mics = normalize_mics(self.mics)

    def text_fields(self) -> list[str]:
        """検索対象の文字列（番号・状態・CH1〜CH8・備考）。"""
        return [self.file_no, self.scene_no, self.cut_no, self.take_no, self.status, *self.mics, self.note]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "fileNo": self.file_no,
            "sceneNo": self.scene_no,
            "cutNo": self.cut_no,
            "takeNo": self.take_no,
            "status": self.status,
            "mics": list(self.mics),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TakeRow":
        """辞書から復元する。欠けたキーは空文字、status は KEEP、id がなければ新規発行。"""
        stamp = now_iso()
        return cls(
            id=str(d.get("id") or new_id()),
            created_at=str(d.get("createdAt") or stamp),
            updated_at=str(d.get("updatedAt") or stamp),
            file_no=str(d.get("fileNo") or ""),
            scene_no=str(d.get("sceneNo") or ""),
            cut_no=str(d.get("cutNo") or ""),
            take_no=str(d.get("takeNo") or ""),
            status=d.get("status") or STATUS_KEEP,
            mics=d.get("mics") or [],
            note=str(d.get("note") or ""),
        )


@dataclass
class Project:
    """1プロジェクト。名前とテイク行の一覧（fileNo 昇順）を保持する。"""

    id: str
    name: str
    created_at: str = ""
    updated_at: str = ""
    rows: list[TakeRow] = field(default_factory=list)

    def touch(self, now: datetime | None = None) -> None:
        """更新日時を現在時刻にする。"""
        self.updated_at = now_iso(now)

    def get_row(self, row_id: str) -> TakeRow | None:
        """ID で行を取得する。"""
        for r in self.rows:
            if r.id == row_id:
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "rows": [r.to_dict() for r in self.rows],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Project":
        rows = d.get("rows")
        return cls(
            id=str(d.get("id") or new_id()),
            name=str(d.get("name") or ""),
            created_at=str(d.get("createdAt") or ""),
            updated_at=str(d.get("updatedAt") or ""),
            rows=[TakeRow.from_dict(r) for r in rows if isinstance(r, dict)] if isinstance(rows, list) else [],
        )
