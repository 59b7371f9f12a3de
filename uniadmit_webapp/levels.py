"""
Projection of 學測 subject scores onto the five standards (五標).

Levels: 5 = 頂標, 4 = 前標, 3 = 均標, 2 = 後標, 1 = 底標, 0 = below 底標.
"""

from __future__ import annotations

from typing import Any

# 114學年度五標: [頂標, 前標, 均標, 後標, 底標]
SUBJECT_STANDARDS: dict[str, tuple[int, int, int, int, int]] = {
    "國文": (13, 12, 10, 9, 7),
    "英文": (13, 11, 8, 4, 3),
    "數學A": (11, 9, 6, 4, 3),
    "數學B": (12, 10, 6, 4, 3),
    "社會": (13, 12, 10, 8, 7),
    "自然": (13, 12, 9, 7, 5),
}
DEFAULT_STANDARDS: tuple[int, int, int, int, int] = (13, 10, 7, 4, 1)

THRESHOLD_LEVELS: dict[str, int] = {
    "頂標": 5,
    "前標": 4,
    "均標": 3,
    "後標": 2,
    "底標": 1,
}

# 英聽: "--" and "無" mean the department sets no listening requirement
LISTENING_LEVELS: dict[str, int] = {
    "A": 4,
    "B": 3,
    "C": 2,
    "F": 1,
    "--": 0,
    "無": 0,
}

# query parameter -> subject name used in exam_thresholds
SCORE_PARAMS: dict[str, str] = {
    "chinese": "國文",
    "english": "英文",
    "mathA": "數學A",
    "mathB": "數學B",
    "science": "自然",
    "social": "社會",
}


def project_level(score: float, subject: str) -> int:
    standards = SUBJECT_STANDARDS.get(subject, DEFAULT_STANDARDS)
    for level, breakpoint in zip((5, 4, 3, 2, 1), standards):
        if score >= breakpoint:
            return level
    return 0


def threshold_level(label: Any) -> int:
    """Required level of an exam threshold label; unknown labels ("無", "--") impose nothing."""
    if label is None:
        return 0
    return THRESHOLD_LEVELS.get(str(label).strip(), 0)


def listening_level(letter: Any) -> int:
    """Ordinal of a department's listening threshold. A missing value counts as F."""
    if letter is None:
        letter = "F"
    return LISTENING_LEVELS.get(str(letter).strip().upper(), 0)


def user_listening_level(letter: str | None) -> int:
    # an unrated or unknown user grade is treated as F
    return LISTENING_LEVELS.get((letter or "F").strip().upper(), 0) or 1


def parse_score(raw: Any) -> int | None:
    text = "" if raw is None else str(raw).strip()
    try:
        value = int(float(text))
    except (ValueError, OverflowError):
        return None
    return value if value > 0 else None


def user_levels_from_scores(raw_scores: dict[str, Any]) -> dict[str, int]:
    levels: dict[str, int] = {}
    for param, subject in SCORE_PARAMS.items():
        score = parse_score(raw_scores.get(param))
        if score is not None:
            levels[subject] = project_level(score, subject)
    return levels
