"""
产品组归类 - 自由文本类别 → ProductGroup

职责：
1. 精确键匹配（区分大小写）
2. 大小写不敏感键匹配
3. 有序正则兜底
4. 以上均未命中 → general

依赖：
- label_rules.yaml: classification.category_groups / category_patterns

测试要点：
- test_exact_match: 精确匹配
- test_case_insensitive_match: 大小写不敏感
- test_pattern_fallback: 正则兜底（顺序敏感）
- test_empty_category: 空类别直接返回general
"""

from __future__ import annotations

from ..config import RuleSpec, load_rules
from ..models import ProductGroup


class ProductGroupClassifier:
    """产品组归类器（总是返回结果，不抛异常）"""

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()
        self.exact = self.rules.get_category_groups()
        self.lowered = {k.lower(): v for k, v in reversed(list(self.exact.items()))}
        self.patterns = self.rules.get_category_patterns()

    def classify(self, category: str | None) -> ProductGroup:
        """归类"""
        if not category:
            return ProductGroup.GENERAL

        group = self.exact.get(category)
        if group:
            return ProductGroup(group)

        group = self.lowered.get(category.lower())
        if group:
            return ProductGroup(group)

        for pattern, group in self.patterns:
            if pattern.search(category):
                return ProductGroup(group)

        return ProductGroup.GENERAL
