"""
CSV・JSON のインポート／エクスポート。

CSV の形式:
- 1 行目はヘッダ（列名をカンマ区切り）。列は createdAt, fileNo, sceneNo, cutNo, takeNo, status, mic1〜mic8, note。
- 値はすべてダブルクォートで囲み、中の " は "" に、改行は空白にする。
- 読み込みは列名で対応付けるので、列の並び替え・欠けがあってもよい。
- 先頭に "sep=," や "#" で始まる設定行があれば読み飛ばす。
"""
import json
import logging
import re
from datetime import datetime

from src.project import MIC_COUNT, STATUS_KEEP, Project, TakeRow, new_id, normalize_status, now_iso
from src.take_repository import sort_rows

logger = logging.getLogger(__name__)

MIC_COLUMNS = [f"mic{i + 1}" for i in range(MIC_COUNT)]
CSV_COLUMNS = ["createdAt", "fileNo", "sceneNo", "cutNo", "takeNo", "status", *MIC_COLUMNS, "note"]
METADATA_MARKERS = ("sep=", "#")
IMPORTED_PROJECT_NAME = "インポート"
DEFAULT_EXPORT_NAME = "project"

# トークナイザの状態
UNQUOTED = "unquoted"
QUOTED = "quoted"
QUOTED_SEEN_QUOTE = "quoted_seen_quote"


class InterchangeError(ValueError):
    """CSV / JSON の内容が読み取れない。"""


def _escape(value: object) -> str:
    s = "" if value is None else str(value)
    s = s.replace('"', '""')
    return re.sub(r"\r\n|\r|\n", " ", s)


def _row_values(row: TakeRow) -> list[str]:
    return [row.created_at, row.file_no, row.scene_no, row.cut_no, row.take_no, row.status, *row.mics, row.note]


def rows_to_csv(rows: list[TakeRow]) -> str:
    """行一覧を CSV テキストにする（BOM なし）。"""
    lines = [",".join(CSV_COLUMNS)]
    for r in rows:
        lines.append(",".join(f'"{_escape(v)}"' for v in _row_values(r)))
    return "\n".join(lines)


def encode_csv_bytes(rows: list[TakeRow]) -> bytes:
    """エクスポート用。Excel で文字化けしないよう BOM 付き UTF-8 にする。"""
    return rows_to_csv(rows).encode("utf-8-sig")


def split_csv_line(line: str) -> list[str]:
    """
    1 行をフィールドに分ける。クォート内のカンマと "" を扱う。
    閉じられていないクォートがあれば InterchangeError。
    """
    cols: list[str] = []
    cur: list[str] = []
    state = UNQUOTED
    for ch in line:
        if state == QUOTED:
            if ch == '"':
                state = QUOTED_SEEN_QUOTE
            else:
                cur.append(ch)
            continue
        if state == QUOTED_SEEN_QUOTE:
            if ch == '"':
                cur.append('"')
                state = QUOTED
                continue
            state = UNQUOTED
        # UNQUOTED
        if ch == '"':
            state = QUOTED
        elif ch == ",":
            cols.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
    if state == QUOTED:
        raise InterchangeError("閉じられていないクォートがあります")
    cols.append("".join(cur))
    return cols


def _is_metadata_line(line: str) -> bool:
    s = line.strip().lower()
    return any(s.startswith(m) for m in METADATA_MARKERS)


def csv_to_rows(text: str, now: datetime | None = None) -> list[TakeRow]:
    """
    CSV テキストを行一覧にする。
    ヘッダ + データ 1 行以上がなければ空リスト。id と updatedAt は常に新しく発行する。
    """
    text = text.lstrip("\ufeff")
    lines = [ln for ln in re.split(r"\r?\n", text) if ln.strip()]
    if lines and _is_metadata_line(lines[0]):
        lines = lines[1:]
    if len(lines) < 2:
        return []
    headers = [h.strip() for h in split_csv_line(lines[0])]
    if not set(headers) & set(CSV_COLUMNS):
        raise InterchangeError("CSV のヘッダを認識できません")
    stamp = now_iso(now)
    rows = []
    for line in lines[1:]:
        cols = split_csv_line(line)
        rec = {h: (cols[i] if i < len(cols) else "") for i, h in enumerate(headers)}
        rows.append(
            TakeRow(
                id=new_id(),
                created_at=rec.get("createdAt") or stamp,
                updated_at=stamp,
                file_no=rec.get("fileNo", ""),
                scene_no=rec.get("sceneNo", ""),
                cut_no=rec.get("cutNo", ""),
                take_no=rec.get("takeNo", ""),
                status=normalize_status(rec.get("status") or STATUS_KEEP),
                mics=[rec.get(c, "") for c in MIC_COLUMNS],
                note=rec.get("note", ""),
            )
        )
    return rows


def project_to_json(project: Project) -> str:
    return json.dumps(project.to_dict(), ensure_ascii=False, indent=2)


def encode_json_bytes(project: Project) -> bytes:
    return project_to_json(project).encode("utf-8")


def json_to_project(text: str, now: datetime | None = None) -> Project:
    """
    JSON テキストから新しいプロジェクトを作る（id と作成・更新日時は新規）。
    オブジェクトでなければ InterchangeError。name が文字列でなければ "インポート"、rows が配列でなければ空。
    """
    try:
        obj = json.loads(text.lstrip("\ufeff"))
    except json.JSONDecodeError as e:
        raise InterchangeError(f"JSON が不正です: {e}") from e
    if not isinstance(obj, dict):
        raise InterchangeError("JSON がオブジェクトではありません")
    name = obj.get("name")
    if not isinstance(name, str) or not name.strip():
        name = IMPORTED_PROJECT_NAME
    raw_rows = obj.get("rows")
    if not isinstance(raw_rows, list):
        raw_rows = []
    skipped = sum(1 for r in raw_rows if not isinstance(r, dict))
    if skipped:
        logger.warning("JSON import: skipped %d non-object rows", skipped)
    stamp = now_iso(now)
    return Project(
        id=new_id(),
        name=name,
        created_at=stamp,
        updated_at=stamp,
        rows=sort_rows(TakeRow.from_dict(r) for r in raw_rows if isinstance(r, dict)),
    )


def export_filename(project_name: str, kind: str) -> str:
    """エクスポートファイル名。csv → "<名前>-takes.csv"、json → 空白を _ にした "<名前>.json"。"""
    name = (project_name or "").strip() or DEFAULT_EXPORT_NAME
    if kind == "csv":
        return f"{name}-takes.csv"
    if kind == "json":
        return re.sub(r"\s+", "_", name) + ".json"
    raise ValueError(f"unknown export kind: {kind!r}")
