"""
设计文件加载 - 读写持久化的 LabelDesign（YAML/JSON，camelCase键）

测试要点：
- test_load_json_design: JSON设计加载
- test_save_and_load_yaml: YAML写出后再读入，隐藏分区元素不丢失
- test_load_invalid_design: 非法内容抛 DesignLoadError
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..interfaces import DesignLoadError
from ..models import LabelDesign


def load_design(path: str | Path) -> LabelDesign:
    """加载设计文件（按扩展名识别YAML/JSON）"""
    path = Path(path)
    if not path.exists():
        raise DesignLoadError(f"设计文件不存在: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DesignLoadError(f"设计文件解析失败: {path}: {e}") from e

    if not isinstance(data, dict):
        raise DesignLoadError(f"设计文件结构无效: {path}")

    # 兼容整包模板格式 {design: {...}}
    if "design" in data and isinstance(data["design"], dict):
        data = data["design"]

    try:
        return LabelDesign.model_validate(data)
    except ValidationError as e:
        raise DesignLoadError(f"设计文件校验失败: {path}: {e}") from e


def save_design(design: LabelDesign, path: str | Path) -> Path:
    """保存设计文件（camelCase键）"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = design.to_storage()

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        else:
            json.dump(data, f, ensure_ascii=False, indent=2)

    return path
