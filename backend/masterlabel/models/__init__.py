"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- ProductRecord/BatchRecord/Supplier: 上游实体记录（只读）
- MasterLabelData: 组装后的不可变标签快照
- LabelDesign: 分区+元素构成的标签设计
- ExportJob: 导出任务状态与生命周期
"""

from .design import (
    ELEMENT_TYPES,
    BarcodeElement,
    BuiltinPictogram,
    ComplianceBadgeElement,
    DividerElement,
    FieldValueElement,
    IconTextElement,
    ImageElement,
    LabelDesign,
    LabelElement,
    LabelElementBase,
    LabelFieldKey,
    LabelSection,
    LabelSectionId,
    LabelTemplate,
    MaterialCodeElement,
    MultiLabelExportConfig,
    PackageCounterElement,
    PackageCounterFormat,
    PictogramElement,
    QRCodeElement,
    SpacerElement,
    TextElement,
)
from .job import ExportJob, ExportRequest, JobStatus
from .label_data import (
    ComplianceModuleIcon,
    CounterContext,
    DesignValidationResult,
    DppQrSection,
    IdentitySection,
    LabelValidationResult,
    LabelVariant,
    MasterLabelData,
    PartyBlock,
    ProductGroup,
    RenderedDocument,
    SustainabilitySection,
)
from .records import (
    AssembleParams,
    BatchRecord,
    Certification,
    Material,
    ProductRecord,
    Recyclability,
    Supplier,
)

__all__ = [
    # 设计
    "LabelDesign",
    "LabelSection",
    "LabelSectionId",
    "LabelTemplate",
    "LabelElement",
    "LabelElementBase",
    "LabelFieldKey",
    "ELEMENT_TYPES",
    "TextElement",
    "FieldValueElement",
    "QRCodeElement",
    "PictogramElement",
    "ComplianceBadgeElement",
    "ImageElement",
    "DividerElement",
    "SpacerElement",
    "MaterialCodeElement",
    "BarcodeElement",
    "IconTextElement",
    "PackageCounterElement",
    "PackageCounterFormat",
    "MultiLabelExportConfig",
    "BuiltinPictogram",
    # 快照
    "ProductGroup",
    "LabelVariant",
    "ComplianceModuleIcon",
    "SustainabilitySection",
    "PartyBlock",
    "IdentitySection",
    "DppQrSection",
    "CounterContext",
    "MasterLabelData",
    "LabelValidationResult",
    "DesignValidationResult",
    "RenderedDocument",
    # 记录
    "Material",
    "Certification",
    "Recyclability",
    "Supplier",
    "ProductRecord",
    "BatchRecord",
    "AssembleParams",
    # 任务
    "ExportJob",
    "ExportRequest",
    "JobStatus",
]
