"""
合规模块构建 - 按产品组生成合规图标列表

职责：
1. 按产品组取固定有序的模块列表（mandatory 静态定义）
2. present = 任一认证名称匹配模块正则，或对应注册号非空
3. 未知产品组使用通用模块（CE/REACH/RoHS/UKCA，均非强制）

测试要点：
- test_electronics_modules: 电子类6个模块及顺序
- test_registration_counts_as_present: 注册号视为具备
- test_unknown_group_fallback: 未知组走通用集
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ..config import RuleSpec, load_rules
from ..models import ComplianceModuleIcon, ProductGroup


class ComplianceModuleBuilder:
    """合规模块构建器"""

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()
        self.cert_patterns = self.rules.get_cert_patterns()

    def build(
        self,
        group: ProductGroup | str,
        cert_names: Iterable[str],
        registrations: Mapping[str, str] | None = None,
    ) -> list[ComplianceModuleIcon]:
        """构建合规模块列表"""
        group_id = group.value if isinstance(group, ProductGroup) else str(group)
        module_rules = self.rules.get_group_modules(group_id)
        if module_rules is None:
            module_rules = self.rules.get_fallback_modules()

        names = [n for n in cert_names if n]
        registrations = registrations or {}

        modules = []
        for rule in module_rules:
            present = self._has_cert(rule.id, names)
            if not present and rule.registration_key:
                present = bool(registrations.get(rule.registration_key))
            modules.append(
                ComplianceModuleIcon(
                    id=rule.id,
                    symbol=rule.symbol,
                    label=rule.label,
                    mandatory=rule.mandatory,
                    present=present,
                )
            )
        return modules

    def _has_cert(self, module_id: str, names: list[str]) -> bool:
        """认证名称是否命中模块正则（无正则的模块恒为False）"""
        pattern = self.cert_patterns.get(module_id)
        if pattern is None:
            return False
        return any(pattern.search(name) for name in names)
