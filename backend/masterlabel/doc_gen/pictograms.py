"""
内置图形库 - EU法规常用标识（15个）

数据来自包内 config/pictograms.yaml，加载后缓存（只读）。
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml

from ..models import BuiltinPictogram

PICTOGRAMS_PATH = Path(__file__).resolve().parent.parent / "config" / "pictograms.yaml"


@lru_cache(maxsize=1)
def load_builtin_pictograms(path: str | Path = PICTOGRAMS_PATH) -> tuple[BuiltinPictogram, ...]:
    """加载内置图形（声明顺序）"""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return tuple(BuiltinPictogram(**item) for item in data.get("pictograms", []))


def get_builtin_pictogram(pictogram_id: str) -> BuiltinPictogram | None:
    """按id查找内置图形"""
    for pictogram in load_builtin_pictograms():
        if pictogram.id == pictogram_id:
            return pictogram
    return None


def get_builtin_pictograms_by_category(category: str) -> list[BuiltinPictogram]:
    """按类别筛选内置图形"""
    return [p for p in load_builtin_pictograms() if p.category == category]


def builtin_pictogram_categories() -> list[str]:
    """内置图形类别（按首次出现顺序去重）"""
    return list(dict.fromkeys(p.category for p in load_builtin_pictograms()))
