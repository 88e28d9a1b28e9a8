"""
设计校验器 - 标签数据与设计的合规报告

职责：
1. 校验标签数据快照（进口商、批次号、目标国家、制造商地址、CE、包装代码、二维码）
2. 校验设计结构（二维码元素、产品名、最小字号、制造商信息）

约定：
- 只输出报告，不抛异常、不阻断渲染；是否阻断由调用方决定
- 最小字号只报告第一个违规元素

测试要点：
- test_importer_missing_error: 无进口商为error
- test_b2c_target_country_warning: B2C无目标国家为warning
- test_ce_not_present_warning: CE适用组且CE模块未具备
- test_font_size_single_report: 多个小字号元素只报告一次
"""

from __future__ import annotations

from ..config import RuleSpec, load_rules
from ..interfaces import IDesignValidator
from ..models import (
    DesignValidationResult,
    FieldValueElement,
    LabelDesign,
    LabelElementBase,
    LabelValidationResult,
    LabelVariant,
    MasterLabelData,
)

# EU最小字高 1.2mm 折合的磅值
MIN_FONT_SIZE_PT = 3.4


def font_size_of(element: LabelElementBase) -> float | None:
    """元素字号（无字号属性返回None）"""
    size = getattr(element, "font_size", None)
    if isinstance(size, (int, float)) and not isinstance(size, bool):
        return float(size)
    return None


def has_field_element(design: LabelDesign, *field_keys: str) -> bool:
    """设计中是否存在绑定指定字段的 field-value 元素"""
    return any(
        isinstance(el, FieldValueElement) and el.field_key in field_keys
        for el in design.elements
    )


class DesignValidator(IDesignValidator):
    """设计校验器实现"""

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()

    def validate_data(self, data: MasterLabelData) -> list[LabelValidationResult]:
        """校验标签数据"""
        results: list[LabelValidationResult] = []

        def add(field: str, message: str, severity: str, key: str) -> None:
            results.append(LabelValidationResult(
                field=field, message=message, severity=severity, i18n_key=f"ml.validation.{key}",
            ))

        if data.identity.importer is None:
            add(
                "importer",
                "EU Importer or Authorized Representative is missing. Required for EU market since 2026.",
                "error",
                "importerMissing",
            )

        if not data.identity.batch_number:
            add(
                "batchNumber",
                "Batch number is missing. Select a batch to include on the label.",
                "error",
                "batchNumberMissing",
            )

        if data.variant == LabelVariant.B2C and not data.b2c_target_country:
            add(
                "targetCountry",
                "Target country not set. B2C labels should specify the target market for language requirements.",
                "warning",
                "targetCountryMissing",
            )

        if not data.identity.manufacturer.address:
            add(
                "manufacturerAddress",
                "Manufacturer address is incomplete. Full postal address is required on product labels.",
                "warning",
                "manufacturerAddressMissing",
            )

        if data.product_group.value in self.rules.get_ce_groups():
            ce = data.get_module("ce")
            if ce is not None and not ce.present:
                add(
                    "ceMark",
                    "CE marking not detected in certifications. Required for this product group.",
                    "warning",
                    "ceMissing",
                )

        if not data.sustainability.packaging_material_codes:
            add(
                "packagingCodes",
                "No packaging material codes detected. PPWR requires packaging material identification.",
                "info",
                "packagingCodesMissing",
            )

        if not data.dpp_qr.qr_data_url:
            add(
                "qrCode",
                "QR code could not be generated. Check DPP URL configuration.",
                "error",
                "qrCodeMissing",
            )

        return results

    def validate_design(self, design: LabelDesign) -> list[DesignValidationResult]:
        """校验设计结构（与数据无关）"""
        results: list[DesignValidationResult] = []

        if not any(el.type == "qr-code" for el in design.elements):
            results.append(DesignValidationResult(
                field="qrCode",
                message="QR code element is required for the DPP link.",
                severity="error",
                i18n_key="ml.validation.qrElementRequired",
            ))

        if not has_field_element(design, "productName"):
            results.append(DesignValidationResult(
                field="productName",
                message="Product name field is recommended on the label.",
                severity="warning",
                i18n_key="ml.validation.productNameRecommended",
            ))

        for element in design.elements:
            size = font_size_of(element)
            if size is not None and size < MIN_FONT_SIZE_PT:
                results.append(DesignValidationResult(
                    field=f"element.{element.id}",
                    message="Font size below 3.4pt (1.2mm). EU regulation requires minimum 1.2mm text height.",
                    severity="error",
                    i18n_key="ml.validation.fontSizeTooSmall",
                ))
                break

        if not has_field_element(design, "manufacturerName", "manufacturerAddress"):
            results.append(DesignValidationResult(
                field="manufacturer",
                message="Manufacturer information is recommended on the label.",
                severity="warning",
                i18n_key="ml.validation.manufacturerRecommended",
            ))

        return results
