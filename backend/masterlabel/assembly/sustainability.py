"""
可持续性信息构建 - 包装材料回收代码与回收说明

职责：
1. 仅处理 type=packaging 的材料
2. 材料名小写后按有序代码表做子串匹配，每种材料首个命中生效
3. 代码去重并保持首次出现顺序
4. 回收说明：包装专用说明 > 通用说明 > ""（不编造默认值）

测试要点：
- test_codes_dedup_in_order: 去重且保序
- test_first_match_wins: 代码表顺序敏感
- test_product_materials_ignored: 非包装材料不参与
- test_instructions_precedence: 说明优先级
"""

from __future__ import annotations

from typing import Iterable

from ..config import RuleSpec, load_rules
from ..models import Material, Recyclability, SustainabilitySection


class SustainabilitySectionBuilder:
    """可持续性信息构建器"""

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()
        self.code_table = self.rules.get_packaging_codes()

    def build(
        self,
        materials: Iterable[Material],
        recyclability: Recyclability | None = None,
    ) -> SustainabilitySection:
        """构建可持续性信息"""
        codes: list[str] = []
        for material in materials:
            if material.type != "packaging":
                continue
            code = self.lookup_code(material.name)
            if code and code not in codes:
                codes.append(code)

        instructions = ""
        if recyclability is not None:
            instructions = recyclability.packaging_instructions or recyclability.instructions or ""

        return SustainabilitySection(
            packaging_material_codes=tuple(codes),
            recycling_instructions=instructions,
            volume_optimized=False,
        )

    def lookup_code(self, material_name: str) -> str | None:
        """查找材料对应的回收代码"""
        lowered = (material_name or "").lower()
        if not lowered:
            return None
        for keyword, code in self.code_table:
            if keyword in lowered:
                return code
        return None
