"""
标签数据组装器 - 实体记录 → MasterLabelData

职责：
1. 产品组归类
2. 选择有效材料/认证/回收信息（批次覆盖非None时优先）
3. 构建合规模块、可持续性、身份信息
4. 附加调用方提供的二维码与DPP链接
5. 仅为所请求的变体填充 B2B/B2C 专属字段

纯函数：无副作用，同样输入得到同样输出。

测试要点：
- test_batch_override_materials: 批次材料覆盖
- test_b2b_fields_only_for_b2b: 变体专属字段隔离
- test_gross_weight_fallback: 毛重 批次 > 产品
"""

from __future__ import annotations

import logging

from ..config import RuleSpec, load_rules
from ..interfaces import ILabelDataAssembler
from ..models import AssembleParams, DppQrSection, LabelVariant, MasterLabelData
from .classifier import ProductGroupClassifier
from .compliance import ComplianceModuleBuilder
from .identity import IdentitySectionBuilder
from .sustainability import SustainabilitySectionBuilder

logger = logging.getLogger(__name__)

DPP_LABEL_TEXT = "Digital Product Passport"


class LabelDataAssembler(ILabelDataAssembler):
    """标签数据组装器实现"""

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()
        self.classifier = ProductGroupClassifier(self.rules)
        self.compliance = ComplianceModuleBuilder(self.rules)
        self.sustainability = SustainabilitySectionBuilder(self.rules)
        self.identity = IdentitySectionBuilder()

    def assemble(self, params: AssembleParams) -> MasterLabelData:
        """组装标签数据快照"""
        product = params.product
        batch = params.batch

        group = self.classifier.classify(product.category)

        # 批次覆盖：None 表示未覆盖，空列表视为显式覆盖
        materials = product.materials
        certifications = product.certifications
        recyclability = product.recyclability
        if batch is not None:
            if batch.materials_override is not None:
                materials = batch.materials_override
            if batch.certifications_override is not None:
                certifications = batch.certifications_override
            if batch.recyclability_override is not None:
                recyclability = batch.recyclability_override

        cert_names = [c.name for c in certifications]

        fields = {
            "variant": params.variant,
            "product_group": group,
            "identity": self.identity.build(
                product,
                batch,
                params.manufacturer_supplier,
                params.importer_supplier,
            ),
            "dpp_qr": DppQrSection(
                qr_data_url=params.qr_data_url,
                label_text=DPP_LABEL_TEXT,
                dpp_url=params.dpp_url,
            ),
            "compliance": tuple(self.compliance.build(group, cert_names, product.registrations)),
            "sustainability": self.sustainability.build(materials, recyclability),
        }

        if params.variant == LabelVariant.B2B:
            fields["b2b_quantity"] = batch.quantity if batch else None
            batch_weight = batch.gross_weight if batch else None
            fields["b2b_gross_weight"] = (
                batch_weight if batch_weight is not None else product.gross_weight
            )
        elif params.variant == LabelVariant.B2C:
            fields["b2c_target_country"] = params.target_country
            fields["b2c_disposal_hint"] = recyclability.instructions if recyclability else ""

        logger.debug(f"标签数据已组装: gtin={product.gtin}, group={group.value}, variant={params.variant.value}")
        return MasterLabelData(**fields)
