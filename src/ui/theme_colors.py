"""
テーマ用色定義。状態バッジとステッパーの配色もここに置く。
"""
COLOR_ACCENT = "#4f46e5"
WINDOW_BG_LIGHT = "#ffffff"
WINDOW_BG_DARK = "#1e293b"
CARD_BG_LIGHT = "#ffffff"
CARD_BORDER_LIGHT = "#e5e7eb"
CARD_BG_DARK = "#334155"
CARD_BORDER_DARK = "#475569"

TEXT_BODY_LIGHT = "#111827"
TEXT_BODY_DARK = "#e2e8f0"

# 状態バッジ（OK / NG / KEEP）
STATUS_COLORS = {
    "OK": "#16a34a",
    "NG": "#dc2626",
    "KEEP": "#f59e0b",
}

# ステッパーの色（S# / C# / T#）
STEPPER_COLORS = {
    "scene": ("#d1fae5", "#064e3b"),
    "cut": ("#e0f2fe", "#0c4a6e"),
    "take": ("#ffe4e6", "#881337"),
}
