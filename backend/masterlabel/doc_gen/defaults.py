"""
默认设计 - 默认分区、新元素、空白设计与内置模板

数据来自包内 config/label_templates.yaml。

测试要点：
- test_default_sections: 6个分区，custom/footer 默认隐藏
- test_create_element_defaults: 新元素带类型默认值与唯一id
- test_templates_per_group: 每个产品组各有一个模板
- test_default_design_is_copy: 修改返回的设计不影响内置模板
"""

from __future__ import annotations

import itertools
import time
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from ..models import (
    ELEMENT_TYPES,
    LabelDesign,
    LabelElementBase,
    LabelSection,
    LabelSectionId,
    LabelTemplate,
    ProductGroup,
)

TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "config" / "label_templates.yaml"

A6_WIDTH_PT = 297.64
A6_HEIGHT_PT = 419.53

_id_counter = itertools.count(1)


def generate_element_id() -> str:
    """生成元素id（进程内唯一）"""
    return f"el_{int(time.time() * 1000)}_{next(_id_counter)}"


@lru_cache(maxsize=1)
def _load_templates_file(path: str | Path = TEMPLATES_PATH) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def create_default_sections() -> list[LabelSection]:
    """默认分区（每次返回新对象）"""
    return [LabelSection.model_validate(item) for item in _load_templates_file().get("sections", [])]


def create_element(
    element_type: str,
    section_id: LabelSectionId | str,
    sort_order: float = 0,
) -> LabelElementBase:
    """创建带默认值的新元素"""
    model = ELEMENT_TYPES.get(element_type)
    if model is None:
        raise ValueError(f"未知元素类型: {element_type}")
    overrides = _load_templates_file().get("element_defaults", {}).get(element_type, {})
    return model.model_validate({
        **overrides,
        "id": generate_element_id(),
        "sectionId": LabelSectionId(section_id).value,
        "sortOrder": sort_order,
    })


def create_blank_design() -> LabelDesign:
    """空白A6设计（默认分区，无元素）"""
    return LabelDesign(
        version=2,
        page_size="A6",
        page_width=A6_WIDTH_PT,
        page_height=A6_HEIGHT_PT,
        padding=14,
        background_color="#ffffff",
        font_family="Helvetica",
        base_font_size=6.5,
        base_text_color="#1a1a1a",
        sections=create_default_sections(),
        elements=[],
    )


def _build_template(item: dict[str, Any]) -> LabelTemplate:
    short_id = item["id"].removeprefix("builtin-")
    elements = []
    for section_id, entries in (item.get("elements") or {}).items():
        for i, entry in enumerate(entries):
            elements.append({
                **entry,
                "id": f"el_{short_id}_{section_id}_{i}",
                "sectionId": section_id,
                "sortOrder": i,
            })

    design = LabelDesign.model_validate({**create_blank_design().to_storage(), "elements": elements})
    return LabelTemplate(
        id=item["id"],
        name=item["name"],
        description=item.get("description", ""),
        category=item["category"],
        design=design,
    )


@lru_cache(maxsize=1)
def load_builtin_templates() -> tuple[LabelTemplate, ...]:
    """内置模板（只读，声明顺序）"""
    return tuple(_build_template(item) for item in _load_templates_file().get("templates", []))


def get_builtin_template(template_id: str) -> LabelTemplate | None:
    for template in load_builtin_templates():
        if template.id == template_id:
            return template
    return None


def get_default_design_for_group(group: ProductGroup | str) -> LabelDesign:
    """产品组默认设计（深拷贝；未知组返回空白设计）"""
    key = group.value if isinstance(group, ProductGroup) else group
    for template in load_builtin_templates():
        if template.category == key:
            return template.design.model_copy(deep=True)
    return create_blank_design()
