"""
プロジェクトの保存・読み込み。
保存先はキー・バリューストア（get/set のみ）。全プロジェクトを JSON 配列で 1 キーに、現在のプロジェクト ID を別キーに置く。
ストアの読み書きに失敗しても例外は出さず、ログに残して処理を続ける。
"""
import copy
import json
import logging
from typing import Protocol

from src.project import Project, new_id, now_iso

logger = logging.getLogger(__name__)

PROJECTS_KEY = "field_projects_v1"
CURRENT_PROJECT_KEY = "field_current_project_v1"
UNTITLED_PROJECT_NAME = "無題プロジェクト"
NEW_PROJECT_NAME = "新規プロジェクト"
COPY_SUFFIX = " コピー"

_STORE_ERRORS = (OSError, ValueError, RuntimeError)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """dict によるストア（テスト・GUI なし用）。"""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


def _read(store: KeyValueStore, key: str) -> str | None:
    try:
        return store.get(key)
    except _STORE_ERRORS:
        logger.warning("store read failed: %s", key, exc_info=True)
        return None


def _write(store: KeyValueStore, key: str, value: str) -> None:
    try:
        store.set(key, value)
    except _STORE_ERRORS:
        logger.warning("store write failed: %s", key, exc_info=True)


def load_projects(store: KeyValueStore) -> list[Project]:
    """保存済みのプロジェクト一覧。未保存・壊れている場合は空リスト。"""
    raw = _read(store, PROJECTS_KEY)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("stored projects are not valid JSON; ignoring")
        return []
    if not isinstance(data, list):
        return []
    return [Project.from_dict(p) for p in data if isinstance(p, dict)]


def save_projects(store: KeyValueStore, projects: list[Project]) -> None:
    payload = json.dumps([p.to_dict() for p in projects], ensure_ascii=False)
    _write(store, PROJECTS_KEY, payload)


def get_current_project_id(store: KeyValueStore) -> str | None:
    return _read(store, CURRENT_PROJECT_KEY) or None


def set_current_project_id(store: KeyValueStore, project_id: str) -> None:
    _write(store, CURRENT_PROJECT_KEY, project_id)


def get_project(store: KeyValueStore, project_id: str) -> Project | None:
    """ID でプロジェクトを読み込む。"""
    for p in load_projects(store):
        if p.id == project_id:
            return p
    return None


def create_project(store: KeyValueStore, name: str = "") -> Project:
    """新規プロジェクトを先頭に追加して保存し、現在のプロジェクトにする。"""
    stamp = now_iso()
    proj = Project(id=new_id(), name=name.strip() or NEW_PROJECT_NAME, created_at=stamp, updated_at=stamp)
    insert_project(store, proj)
    return proj


def insert_project(store: KeyValueStore, project: Project) -> None:
    """プロジェクトを一覧の先頭に追加し、現在のプロジェクトにする（JSON 取り込み・複製用）。"""
    save_projects(store, [project, *load_projects(store)])
    set_current_project_id(store, project.id)


def upsert_project(store: KeyValueStore, project: Project) -> None:
    """同じ ID のプロジェクトを置き換える。なければ先頭に追加する。"""
    projects = load_projects(store)
    for i, p in enumerate(projects):
        if p.id == project.id:
            projects[i] = project
            break
    else:
        projects.insert(0, project)
    save_projects(store, projects)


def rename_project(store: KeyValueStore, project_id: str, name: str) -> Project | None:
    """名前を変更する。空の名前なら変更しない。"""
    proj = get_project(store, project_id)
    if proj is None:
        return None
    if name.strip():
        proj.name = name.strip()
        proj.touch()
        upsert_project(store, proj)
    return proj


def duplicate_project(store: KeyValueStore, project_id: str) -> Project | None:
    """行を丸ごと複製した新しいプロジェクト（名前 + " コピー"）を作り、現在のプロジェクトにする。"""
    orig = get_project(store, project_id)
    if orig is None:
        return None
    stamp = now_iso()
    proj = Project(
        id=new_id(),
        name=orig.name + COPY_SUFFIX,
        created_at=stamp,
        updated_at=stamp,
        rows=copy.deepcopy(orig.rows),
    )
    insert_project(store, proj)
    return proj


def delete_project(store: KeyValueStore, project_id: str) -> Project:
    """
    プロジェクトを削除し、次に開くプロジェクトを返す。
    残りがなければ「無題プロジェクト」を作って返す。
    """
    rest = [p for p in load_projects(store) if p.id != project_id]
    save_projects(store, rest)
    if rest:
        set_current_project_id(store, rest[0].id)
        return rest[0]
    return create_project(store, UNTITLED_PROJECT_NAME)


def ensure_initial_project(store: KeyValueStore) -> tuple[Project, bool]:
    """
    起動時に開くプロジェクトを決める。
    返り値は (プロジェクト, 前回のプロジェクトを復元できたか)。
    保存がなければ「無題プロジェクト」を作る。前回の ID が見つからなければ先頭のプロジェクト。
    """
    projects = load_projects(store)
    if not projects:
        return create_project(store, UNTITLED_PROJECT_NAME), False
    saved_id = get_current_project_id(store)
    for p in projects:
        if p.id == saved_id:
            return p, True
    return projects[0], False
