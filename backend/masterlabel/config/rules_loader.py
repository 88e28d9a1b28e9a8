"""
规则表加载器 - 读取包内 config/label_rules.yaml

职责：
- 解析YAML并提供类型安全访问
- 提供类别映射、认证正则、合规模块、包装代码等有序规则表
- 缓存加载结果（避免重复解析，规则表只读共享）

使用方式：
    rules = RuleLoader.load()
    modules = rules.get_group_modules("electronics")
    codes = rules.get_packaging_codes()
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_RULES_PATH = Path(__file__).with_name("label_rules.yaml")


class CategoryPattern(BaseModel):
    """类别名称正则"""
    group: str
    pattern: str


class ModuleRule(BaseModel):
    """合规模块规则"""
    id: str
    symbol: str
    label: str
    mandatory: bool = False
    registration_key: str | None = None


class PackagingCodeRule(BaseModel):
    """包装材料代码规则"""
    material: str
    code: str


class RuleSpec(BaseModel):
    """规则表（label_rules.yaml 的结构化表示）"""
    schema_version: str

    classification: dict = Field(default_factory=dict)
    cert_patterns: dict[str, str] = Field(default_factory=dict)
    compliance_modules: dict[str, list[ModuleRule]] = Field(default_factory=dict)
    ce_applicable_groups: list[str] = Field(default_factory=list)
    packaging_codes: list[PackagingCodeRule] = Field(default_factory=list)
    eu_countries: list[str] = Field(default_factory=list)

    # === 便捷访问方法 ===

    def get_category_groups(self) -> dict[str, str]:
        """获取类别→产品组映射（保持声明顺序）"""
        return dict(self.classification.get("category_groups", {}))

    def get_category_patterns(self) -> list[tuple[re.Pattern[str], str]]:
        """获取编译后的类别正则（顺序敏感）"""
        raw = self.classification.get("category_patterns", [])
        items = [CategoryPattern(**p) for p in raw]
        return [(re.compile(p.pattern, re.IGNORECASE), p.group) for p in items]

    def get_group_labels(self) -> dict[str, str]:
        """获取产品组显示名"""
        return dict(self.classification.get("group_labels", {}))

    def get_cert_patterns(self) -> dict[str, re.Pattern[str]]:
        """获取编译后的认证识别正则"""
        return {k: re.compile(v, re.IGNORECASE) for k, v in self.cert_patterns.items()}

    def get_group_modules(self, group: str) -> list[ModuleRule] | None:
        """获取产品组的合规模块规则（未定义返回None）"""
        return self.compliance_modules.get(group)

    def get_fallback_modules(self) -> list[ModuleRule]:
        """获取通用合规模块规则"""
        return self.compliance_modules.get("general", [])

    def get_ce_groups(self) -> list[str]:
        """获取需要CE标识的产品组"""
        return list(self.ce_applicable_groups)

    def get_packaging_codes(self) -> list[tuple[str, str]]:
        """获取包装材料→代码表（顺序敏感）"""
        return [(r.material, r.code) for r in self.packaging_codes]

    def get_eu_countries(self) -> list[str]:
        """获取EU成员国代码"""
        return list(self.eu_countries)


class RuleLoader:
    """规则表加载器（单例模式+缓存）"""

    _instance: RuleLoader | None = None

    def __new__(cls) -> RuleLoader:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    @lru_cache(maxsize=4)
    def load(cls, rules_path: str | Path = DEFAULT_RULES_PATH) -> RuleSpec:
        """加载并缓存规则表"""
        path = Path(rules_path)
        if not path.exists():
            raise FileNotFoundError(f"规则表文件不存在: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return RuleSpec(**data)

    @classmethod
    def reload(cls, rules_path: str | Path = DEFAULT_RULES_PATH) -> RuleSpec:
        """强制重新加载（清除缓存）"""
        cls.load.cache_clear()
        return cls.load(rules_path)


# 便捷函数
def load_rules(rules_path: str | Path | None = None) -> RuleSpec:
    """加载规则表"""
    return RuleLoader.load(rules_path or DEFAULT_RULES_PATH)
