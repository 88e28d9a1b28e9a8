"""
设计校验与合规清单单元测试

每个模块完成后必须运行：pytest tests/unit/test_validation.py -v
"""

import pytest

from masterlabel.models import (
    ComplianceBadgeElement,
    FieldValueElement,
    IdentitySection,
    LabelDesign,
    LabelVariant,
    MasterLabelData,
    ProductGroup,
    SustainabilitySection,
    TextElement,
)
from masterlabel.validation import DesignValidator, calculate_compliance_score, run_compliance_checks
from masterlabel.validation.compliance_checker import ComplianceCheckItem


@pytest.fixture
def validator(rules) -> DesignValidator:
    return DesignValidator(rules)


def _keys(results) -> list[str]:
    return [r.i18n_key for r in results]


class TestValidateData:
    """标签数据校验测试"""

    def test_complete_data_passes(self, validator, label_data):
        """测试完整数据无问题"""
        assert validator.validate_data(label_data) == []

    def test_importer_missing_error(self, validator, label_data):
        """测试无进口商为error"""
        identity = label_data.identity.model_copy(update={"importer": None})
        results = validator.validate_data(label_data.model_copy(update={"identity": identity}))
        assert len(results) == 1
        assert results[0].field == "importer"
        assert results[0].severity == "error"
        assert results[0].i18n_key == "ml.validation.importerMissing"

    def test_b2c_target_country_warning(self, validator, label_data):
        """测试B2C无目标国家为warning"""
        data = label_data.model_copy(update={"variant": LabelVariant.B2C, "b2c_target_country": ""})
        results = validator.validate_data(data)
        assert _keys(results) == ["ml.validation.targetCountryMissing"]
        assert results[0].severity == "warning"

    def test_ce_not_present_warning(self, validator, label_data):
        """测试CE适用组且CE模块未具备"""
        compliance = tuple(
            m.model_copy(update={"present": False}) if m.id == "ce" else m for m in label_data.compliance
        )
        results = validator.validate_data(label_data.model_copy(update={"compliance": compliance}))
        assert _keys(results) == ["ml.validation.ceMissing"]

    def test_ce_not_checked_for_textiles(self, validator, label_data):
        """测试纺织类不检查CE"""
        data = label_data.model_copy(update={"product_group": ProductGroup.TEXTILES, "compliance": ()})
        assert "ml.validation.ceMissing" not in _keys(validator.validate_data(data))

    def test_all_findings_in_order(self, validator, label_data):
        """测试空快照的全部问题及顺序"""
        data = label_data.model_copy(update={
            "variant": LabelVariant.B2C,
            "identity": IdentitySection(),
            "sustainability": SustainabilitySection(),
            "dpp_qr": label_data.dpp_qr.model_copy(update={"qr_data_url": ""}),
        })
        results = validator.validate_data(data)
        assert [r.field for r in results] == [
            "importer", "batchNumber", "targetCountry", "manufacturerAddress", "packagingCodes", "qrCode",
        ]
        assert [r.severity for r in results] == ["error", "error", "warning", "warning", "info", "error"]

    def test_messages(self, validator, label_data):
        """测试提示文案"""
        data = label_data.model_copy(update={"sustainability": SustainabilitySection()})
        message = validator.validate_data(data)[0].message
        assert message.startswith("No packaging material codes detected.")


class TestValidateDesign:
    """设计结构校验测试"""

    def test_template_passes(self, validator, design):
        """测试内置模板无问题"""
        assert validator.validate_design(design) == []

    def test_empty_design(self, validator):
        """测试空设计"""
        results = validator.validate_design(LabelDesign())
        assert _keys(results) == [
            "ml.validation.qrElementRequired",
            "ml.validation.productNameRecommended",
            "ml.validation.manufacturerRecommended",
        ]
        assert results[0].severity == "error"

    def test_font_size_single_report(self, validator, design):
        """测试多个小字号元素只报告一次"""
        design.elements.append(TextElement(id="tiny1", section_id="footer", content="a", font_size=2))
        design.elements.append(TextElement(id="tiny2", section_id="footer", content="b", font_size=3))
        results = validator.validate_design(design)
        assert _keys(results) == ["ml.validation.fontSizeTooSmall"]
        assert results[0].field == "element.tiny1"

    def test_font_size_boundary(self, validator, design):
        """测试3.4pt不报告"""
        design.elements.append(TextElement(id="edge", section_id="footer", content="a", font_size=3.4))
        assert validator.validate_design(design) == []

    def test_manufacturer_address_satisfies(self, validator, design):
        """测试制造商地址字段同样满足"""
        design.elements = [
            el for el in design.elements
            if not (isinstance(el, FieldValueElement) and el.field_key == "manufacturerName")
        ]
        assert "ml.validation.manufacturerRecommended" in _keys(validator.validate_design(design))
        design.elements.append(FieldValueElement(id="addr", section_id="identity", field_key="manufacturerAddress"))
        assert validator.validate_design(design) == []


class TestComplianceChecks:
    """合规清单测试"""

    def test_electronics_checks_order(self, rules, design, label_data: MasterLabelData):
        """测试电子类检查项及顺序"""
        checks = run_compliance_checks(design, label_data, "electronics", "b2b", rules)
        assert [c.id for c in checks] == [
            "ce-marking", "weee-symbol", "manufacturer-name", "manufacturer-address", "eu-importer",
            "batch-serial", "gtin", "product-name", "qr-dpp", "rohs-badge", "packaging-codes", "eprel",
            "min-font-size",
        ]
        failed = [c.id for c in checks if not c.passed]
        assert failed == ["manufacturer-address"]

    def test_score(self, rules, design, label_data):
        """测试加权评分：26/29 → 90"""
        checks = run_compliance_checks(design, label_data, "electronics", "b2b", rules)
        assert calculate_compliance_score(checks) == 90

    def test_importer_severity_depends_on_country(self, rules, design, label_data):
        """测试制造商在EU境外时进口商为critical"""
        checks = {c.id: c for c in run_compliance_checks(design, label_data, "electronics", "b2b", rules)}
        assert checks["eu-importer"].severity == "critical"

        manufacturer = label_data.identity.manufacturer.model_copy(update={"country": "de"})
        identity = label_data.identity.model_copy(update={"manufacturer": manufacturer})
        eu_data = label_data.model_copy(update={"identity": identity})
        design.elements = [
            el for el in design.elements
            if not (isinstance(el, FieldValueElement) and el.field_key == "importerName")
        ]
        checks = {c.id: c for c in run_compliance_checks(design, eu_data, "electronics", "b2b", rules)}
        assert checks["eu-importer"].severity == "warning"
        assert checks["eu-importer"].passed

    def test_b2c_adds_country_of_origin(self, rules, design, label_data):
        """测试B2C增加原产国检查"""
        checks = run_compliance_checks(design, label_data, "electronics", "b2c", rules)
        origin = next(c for c in checks if c.id == "country-origin")
        assert origin.severity == "info"
        assert not origin.passed
        assert origin.fix_action.field_key == "countryOfOrigin"

    def test_textiles_skip_electronics_checks(self, rules, label_data):
        """测试纺织类无CE/WEEE/RoHS/EPREL检查"""
        checks = run_compliance_checks(LabelDesign(), label_data, ProductGroup.TEXTILES, LabelVariant.B2B, rules)
        ids = [c.id for c in checks]
        for check_id in ("ce-marking", "weee-symbol", "rohs-badge", "eprel"):
            assert check_id not in ids

    def test_weee_badge_counts(self, rules, label_data):
        """测试WEEE徽章同样满足WEEE检查"""
        design = LabelDesign(elements=[ComplianceBadgeElement(id="w", section_id="compliance", badge_id="weee")])
        checks = {c.id: c for c in run_compliance_checks(design, label_data, "electronics", "b2b", rules)}
        assert checks["weee-symbol"].passed
        assert checks["ce-marking"].fix_action.badge_id == "ce"

    def test_min_font_fix_points_at_offender(self, rules, design, label_data):
        """测试最小字号修复建议指向违规元素"""
        design.elements.append(TextElement(id="tiny", section_id="footer", content="a", font_size=3))
        checks = {c.id: c for c in run_compliance_checks(design, label_data, "electronics", "b2b", rules)}
        assert not checks["min-font-size"].passed
        assert checks["min-font-size"].fix_action.type == "fix-element"
        assert checks["min-font-size"].fix_action.element_id == "tiny"

    def test_min_font_uses_base_size_without_sized_elements(self, rules, label_data):
        """测试无字号元素时取设计基础字号"""
        checks = {c.id: c for c in run_compliance_checks(LabelDesign(base_font_size=3), label_data, "general", "b2b", rules)}
        assert not checks["min-font-size"].passed
        assert checks["min-font-size"].fix_action is None


class TestComplianceScore:
    """合规评分测试"""

    def _check(self, severity: str, passed: bool) -> ComplianceCheckItem:
        return ComplianceCheckItem(
            id="x", label_key="k", description_key="d", severity=severity, passed=passed,
        )

    def test_empty_is_full_score(self):
        assert calculate_compliance_score([]) == 100

    def test_weighted(self):
        """测试严重级别加权"""
        checks = [self._check("critical", True), self._check("warning", False), self._check("info", True)]
        # (3 + 0.5) / 5 = 70%
        assert calculate_compliance_score(checks) == 70

    def test_round_half_up(self):
        """测试 .5 进位"""
        checks = [self._check("info", True)] + [self._check("info", False)] * 7
        # 1/8 = 12.5%
        assert calculate_compliance_score(checks) == 13
