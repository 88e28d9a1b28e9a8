"""
合规检查清单 - 按产品组/变体评估设计是否包含法规要求的元素

每项检查带严重级别与修复建议（添加字段/徽章/图形，或修正元素）。
评分按严重级别加权：critical 3, warning 1.5, info 0.5。
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel

from ..config import RuleSpec, load_rules
from ..models import (
    ComplianceBadgeElement,
    LabelDesign,
    LabelVariant,
    MasterLabelData,
    PictogramElement,
    ProductGroup,
)
from .validator import MIN_FONT_SIZE_PT, font_size_of, has_field_element

CheckSeverity = Literal["critical", "warning", "info"]

SEVERITY_WEIGHTS: dict[str, float] = {"critical": 3.0, "warning": 1.5, "info": 0.5}


class FixAction(BaseModel):
    """修复建议"""
    type: Literal["add-field", "add-badge", "add-pictogram", "fix-element"]
    field_key: str | None = None
    badge_id: str | None = None
    symbol: str | None = None
    pictogram_id: str | None = None
    element_id: str | None = None


class ComplianceCheckItem(BaseModel):
    """检查项"""
    id: str
    label_key: str
    description_key: str
    severity: CheckSeverity
    passed: bool
    fix_action: FixAction | None = None


def _has_badge(design: LabelDesign, badge_id: str) -> bool:
    return any(isinstance(el, ComplianceBadgeElement) and el.badge_id == badge_id for el in design.elements)


def _has_pictogram(design: LabelDesign, pictogram_id: str) -> bool:
    return any(isinstance(el, PictogramElement) and el.pictogram_id == pictogram_id for el in design.elements)


def _has_type(design: LabelDesign, element_type: str) -> bool:
    return any(el.type == element_type for el in design.elements)


def _item(
    check_id: str,
    key: str,
    severity: CheckSeverity,
    passed: bool,
    fix: FixAction | None = None,
) -> ComplianceCheckItem:
    return ComplianceCheckItem(
        id=check_id,
        label_key=f"ml.check.{key}",
        description_key=f"ml.check.{key}Desc",
        severity=severity,
        passed=passed,
        fix_action=fix,
    )


def _add_field(field_key: str) -> FixAction:
    return FixAction(type="add-field", field_key=field_key)


def run_compliance_checks(
    design: LabelDesign,
    data: MasterLabelData,
    group: ProductGroup | str,
    variant: LabelVariant | str,
    rules: RuleSpec | None = None,
) -> list[ComplianceCheckItem]:
    """执行合规检查清单"""
    rules = rules or load_rules()
    group = ProductGroup(group)
    variant = LabelVariant(variant)
    checks: list[ComplianceCheckItem] = []

    if group.value in rules.get_ce_groups():
        checks.append(_item(
            "ce-marking", "ceMarking", "critical", _has_badge(design, "ce"),
            FixAction(type="add-badge", badge_id="ce", symbol="CE"),
        ))

    if group == ProductGroup.ELECTRONICS:
        checks.append(_item(
            "weee-symbol", "weeeSymbol", "critical",
            _has_pictogram(design, "weee-bin") or _has_badge(design, "weee"),
            FixAction(type="add-pictogram", pictogram_id="weee-bin"),
        ))

    checks.append(_item(
        "manufacturer-name", "manufacturerName", "critical",
        has_field_element(design, "manufacturerName"), _add_field("manufacturerName"),
    ))
    checks.append(_item(
        "manufacturer-address", "manufacturerAddress", "critical",
        has_field_element(design, "manufacturerAddress"), _add_field("manufacturerAddress"),
    ))

    # 制造商在EU境外时进口商为必需（国家未知按EU处理）
    country = (data.identity.manufacturer.country or "").upper()
    is_eu = not country or country in rules.get_eu_countries()
    checks.append(_item(
        "eu-importer", "euImporter", "warning" if is_eu else "critical",
        has_field_element(design, "importerName") or is_eu, _add_field("importerName"),
    ))

    checks.append(_item(
        "batch-serial", "batchSerial", "critical",
        has_field_element(design, "batchNumber", "serialNumber"), _add_field("batchNumber"),
    ))
    checks.append(_item(
        "gtin", "gtin", "warning",
        has_field_element(design, "gtin") or _has_type(design, "barcode"), _add_field("gtin"),
    ))
    checks.append(_item(
        "product-name", "productName", "warning",
        has_field_element(design, "productName"), _add_field("productName"),
    ))
    checks.append(_item("qr-dpp", "qrDpp", "critical", _has_type(design, "qr-code")))

    if group == ProductGroup.ELECTRONICS:
        checks.append(_item(
            "rohs-badge", "rohsBadge", "warning", _has_badge(design, "rohs"),
            FixAction(type="add-badge", badge_id="rohs", symbol="RoHS"),
        ))

    checks.append(_item("packaging-codes", "packagingCodes", "warning", _has_type(design, "material-code")))

    if group == ProductGroup.ELECTRONICS:
        checks.append(_item(
            "eprel", "eprel", "info",
            has_field_element(design, "eprelNumber"), _add_field("eprelNumber"),
        ))

    if variant == LabelVariant.B2C:
        checks.append(_item(
            "country-origin", "countryOrigin", "info",
            has_field_element(design, "countryOfOrigin", "madeIn"), _add_field("countryOfOrigin"),
        ))

    # 无字号元素时取设计基础字号
    sized = [(el, size) for el in design.elements if (size := font_size_of(el)) is not None]
    min_size = min((size for _, size in sized), default=design.base_font_size)
    if min_size < MIN_FONT_SIZE_PT:
        offender = next((el for el, size in sized if size < MIN_FONT_SIZE_PT), None)
        fix = FixAction(type="fix-element", element_id=offender.id) if offender is not None else None
        checks.append(_item("min-font-size", "minFontSize", "warning", False, fix))
    else:
        checks.append(_item("min-font-size", "minFontSize", "warning", True))

    return checks


def calculate_compliance_score(checks: list[ComplianceCheckItem]) -> int:
    """加权合规分（0-100，无检查项时为100）"""
    total = sum(SEVERITY_WEIGHTS[c.severity] for c in checks)
    if total <= 0:
        return 100
    passed = sum(SEVERITY_WEIGHTS[c.severity] for c in checks if c.passed)
    # 四舍五入（.5 进位）
    return int(math.floor(passed / total * 100 + 0.5))
