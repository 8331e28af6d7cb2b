"""
S#（シーン）・C#（カット）・T#（テイク）番号の分解・結合と増減ルール。

番号トークンの形式:
- 数字 + 任意の 1 文字サフィックス（a〜g）。例: "12", "3b"
- カットのみ、シーン全体を指す "only" を取り得る（内部値は -1）。
"""
import re
from dataclasses import dataclass

SUFFIXES: tuple[str, ...] = ("", "a", "b", "c", "d", "e", "f", "g")
ONLY_TOKEN = "only"
CUT_ONLY = -1
FAST_STEP = 5

ROLE_SCENE = "scene"
ROLE_CUT = "cut"
ROLE_TAKE = "take"
ROLES = (ROLE_SCENE, ROLE_CUT, ROLE_TAKE)

_TOKEN_RE = re.compile(r"^(\d+)([a-g]?)$", re.IGNORECASE)


@dataclass(frozen=True)
class Identifier:
    """番号 + サフィックス。num が CUT_ONLY のときは "only"（サフィックスなし）。"""

    num: int
    suffix: str = ""

    @property
    def is_only(self) -> bool:
        return self.num == CUT_ONLY

    def token(self) -> str:
        return combine(self.num, self.suffix)


ONLY = Identifier(CUT_ONLY, "")


def parse(token: str) -> Identifier:
    """
    番号トークンを Identifier に分解する。
    "only" は ONLY、解釈できない入力は Identifier(0, "") に落とす（例外は出さない）。
    """
    s = str(token or "").strip()
    if s.lower() == ONLY_TOKEN:
        return ONLY
    m = _TOKEN_RE.match(s)
    if not m:
        return Identifier(0, "")
    return Identifier(int(m.group(1)), m.group(2).lower())


def combine(num: int, suffix: str = "") -> str:
    """番号とサフィックスをトークンにする。num が CUT_ONLY なら常に "only"。"""
    if num == CUT_ONLY:
        return ONLY_TOKEN
    return f"{max(0, num)}{effective_suffix(num, suffix)}"


def effective_suffix(num: int, suffix: str) -> str:
    """only の間はサフィックスを無視する。未知のサフィックスも空にする。"""
    if num == CUT_ONLY:
        return ""
    s = (suffix or "").lower()
    return s if s in SUFFIXES else ""


def _check_role(role: str) -> None:
    if role not in ROLES:
        raise ValueError(f"unknown role: {role!r}")


def step(role: str, num: int, delta: int) -> int:
    """
    ±1 ボタンの増減。
    シーン・テイクは 1 未満にならない。カットは 1 から減らすと only、only から増やすと 1。
    """
    _check_role(role)
    if role != ROLE_CUT:
        return max(1, num + delta)
    if num == CUT_ONLY:
        return 1 if delta > 0 else CUT_ONLY
    new = num + delta
    return new if new >= 1 else CUT_ONLY


def fast_step(role: str, num: int, delta: int = FAST_STEP) -> int:
    """±5 ボタンの増減。only は 1 とみなして計算する（only +5 → 6）。"""
    _check_role(role)
    base = 1 if num == CUT_ONLY else num
    new = base + delta
    if role == ROLE_CUT and new < 1:
        return CUT_ONLY
    return max(1, new)

