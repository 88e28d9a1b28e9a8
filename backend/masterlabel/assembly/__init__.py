"""
数据组装层 - 实体记录到标签快照

流程：归类 → 合规模块 → 可持续性 → 身份信息 → 快照
"""

from .assembler import LabelDataAssembler
from .classifier import ProductGroupClassifier
from .compliance import ComplianceModuleBuilder
from .dpp import QRCodeGenerator, attach_dpp_qr, build_dpp_url, decode_data_url
from .identity import IdentitySectionBuilder, format_supplier_address
from .sustainability import SustainabilitySectionBuilder

__all__ = [
    "LabelDataAssembler",
    "ProductGroupClassifier",
    "ComplianceModuleBuilder",
    "SustainabilitySectionBuilder",
    "IdentitySectionBuilder",
    "format_supplier_address",
    "QRCodeGenerator",
    "build_dpp_url",
    "attach_dpp_qr",
    "decode_data_url",
]
