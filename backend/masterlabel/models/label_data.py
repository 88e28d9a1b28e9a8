"""
标签数据快照 - 组装结果与校验结果

职责：
1. 定义 MasterLabelData 及其子结构（身份/DPP/合规/可持续性）
2. 快照不可变（frozen），批量导出时通过 with_counter 派生副本
3. 定义校验结果与渲染结果结构

测试要点：
- test_snapshot_frozen: 快照不可修改
- test_with_counter_derives_copy: 派生副本不影响原快照
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .design import PackageCounterFormat

ValidationSeverity = Literal["error", "warning", "info"]

FROZEN = {"frozen": True}


class ProductGroup(str, Enum):
    """产品组（每次组装时重新计算，不持久化）"""
    ELECTRONICS = "electronics"
    TEXTILES = "textiles"
    TOYS = "toys"
    HOUSEHOLD = "household"
    GENERAL = "general"


class LabelVariant(str, Enum):
    """标签变体"""
    B2B = "b2b"
    B2C = "b2c"


class ComplianceModuleIcon(BaseModel):
    """合规模块（present 每次构建时重新判定）"""
    id: str
    symbol: str
    label: str
    mandatory: bool = False
    present: bool = False

    model_config = FROZEN


class SustainabilitySection(BaseModel):
    """可持续性信息"""
    packaging_material_codes: tuple[str, ...] = ()
    recycling_instructions: str = ""
    volume_optimized: bool = False

    model_config = FROZEN


class PartyBlock(BaseModel):
    """制造商/进口商信息块"""
    name: str = ""
    address: str = ""
    country: str = ""

    model_config = FROZEN


class IdentitySection(BaseModel):
    """身份与追溯信息"""
    product_name: str = ""
    model_sku: str = ""
    batch_number: str = ""
    manufacturer: PartyBlock = Field(default_factory=PartyBlock)
    importer: PartyBlock | None = None

    model_config = FROZEN


class DppQrSection(BaseModel):
    """数字产品护照二维码"""
    qr_data_url: str = ""
    label_text: str = "Digital Product Passport"
    dpp_url: str = ""

    model_config = FROZEN


class CounterContext(BaseModel):
    """包裹计数上下文（仅存在于批量导出的派生副本）"""
    current: int
    total: int
    format: PackageCounterFormat = PackageCounterFormat.X_OF_Y
    locale: str = "en"

    model_config = FROZEN


class MasterLabelData(BaseModel):
    """标签数据快照"""
    variant: LabelVariant
    product_group: ProductGroup
    identity: IdentitySection
    dpp_qr: DppQrSection
    compliance: tuple[ComplianceModuleIcon, ...] = ()
    sustainability: SustainabilitySection = Field(default_factory=SustainabilitySection)

    # B2B
    b2b_quantity: int | None = None
    b2b_gross_weight: float | None = None  # 克

    # B2C
    b2c_target_country: str | None = None
    b2c_disposal_hint: str | None = None

    counter: CounterContext | None = None

    model_config = FROZEN

    def with_counter(
        self,
        current: int,
        total: int,
        format: PackageCounterFormat = PackageCounterFormat.X_OF_Y,
        locale: str = "en",
    ) -> MasterLabelData:
        """派生带计数上下文的副本（原快照不变）"""
        ctx = CounterContext(current=current, total=total, format=format, locale=locale)
        return self.model_copy(update={"counter": ctx})

    def get_module(self, module_id: str) -> ComplianceModuleIcon | None:
        """按id查找合规模块"""
        for module in self.compliance:
            if module.id == module_id:
                return module
        return None


# ============================================================================
# 校验与渲染结果
# ============================================================================

class LabelValidationResult(BaseModel):
    """数据校验结果"""
    field: str
    message: str
    severity: ValidationSeverity
    i18n_key: str


class DesignValidationResult(LabelValidationResult):
    """设计校验结果"""
    pass


class RenderedDocument(BaseModel):
    """渲染产物"""
    filename: str
    content: bytes = Field(repr=False)
    page_count: int = 1
    copy_index: int | None = None  # 批量逐份导出时为计数current
