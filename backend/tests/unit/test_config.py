"""
配置加载单元测试

每个模块完成后必须运行：pytest tests/unit/test_config.py -v
"""

import logging

import pytest
import yaml

from masterlabel.config import LoggingConfig, RuleSpec, RuntimeConfig, configure_logging, load_design, save_design
from masterlabel.interfaces import ConfigError, DesignLoadError
from masterlabel.models import LabelDesign, TextElement


class TestRuleSpec:
    """规则表测试"""

    def test_load_rules(self, rules: RuleSpec):
        """测试加载规则表"""
        assert rules.schema_version == "1.0"

    def test_category_groups_declared_order(self, rules: RuleSpec):
        """测试类别映射保持声明顺序"""
        groups = rules.get_category_groups()
        assert list(groups)[0] == "Electronics"
        assert groups["Kitchenware"] == "household"

    def test_group_modules(self, rules: RuleSpec):
        """测试产品组模块顺序"""
        modules = rules.get_group_modules("electronics")
        assert [m.id for m in modules] == ["ce", "weee", "rohs", "emc", "red", "energy_label"]
        assert rules.get_group_modules("unknown") is None

    def test_fallback_modules_not_mandatory(self, rules: RuleSpec):
        """测试通用模块均非强制"""
        fallback = rules.get_fallback_modules()
        assert [m.id for m in fallback] == ["ce", "reach", "rohs", "ukca"]
        assert not any(m.mandatory for m in fallback)

    def test_packaging_codes_order(self, rules: RuleSpec):
        """测试包装代码表顺序"""
        codes = rules.get_packaging_codes()
        assert codes[0] == ("paper", "PAP 20")
        assert ("aluminum", "ALU 41") in codes

    def test_eu_countries(self, rules: RuleSpec):
        """测试EU成员国列表"""
        countries = rules.get_eu_countries()
        assert "DE" in countries
        assert "CN" not in countries
        assert len(countries) == 27


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.batch_export.delay_ms == 300
        assert config.batch_export.max_label_count == 999
        assert config.qr.error_correction == "H"
        assert config.qr.width == 200

    def test_get_job_dir(self, runtime_config: RuntimeConfig):
        """测试获取任务目录"""
        job_dir = runtime_config.get_job_dir("test-job-id")
        assert "test-job-id" in str(job_dir)

    def test_from_yaml_flattens_defaults(self, temp_dir):
        """测试YAML加载（{default: x} 形式展平）"""
        path = temp_dir / "label_runtime.yaml"
        path.write_text(
            yaml.safe_dump({
                "runtime_options": {
                    "batch_export": {"delay_ms": {"default": 0, "desc": "no wait"}},
                    "qr": {"resolver_format": "gs1"},
                    "output": {"output_dir": "out"},
                }
            }),
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(path)
        assert config.batch_export.delay_ms == 0
        assert config.qr.resolver_format == "gs1"
        assert config.output.output_dir == (temp_dir / "out").resolve()

    def test_from_yaml_missing_file(self, temp_dir):
        """测试配置文件不存在时使用默认值"""
        config = RuntimeConfig.from_yaml(temp_dir / "missing.yaml")
        assert config.render.section_gap == 4.0

    def test_from_yaml_rules_path(self, temp_dir):
        """测试 paths.rules_path 相对配置文件目录解析"""
        path = temp_dir / "label_runtime.yaml"
        path.write_text(
            yaml.safe_dump({"runtime_options": {"paths": {"rules_path": {"default": "rules/custom.yaml"}}}}),
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(path)
        assert config.rules_path == (temp_dir / "rules" / "custom.yaml").resolve()


class TestDesignLoader:
    """设计文件读写测试"""

    def test_save_and_load_json(self, temp_dir, design: LabelDesign):
        """测试JSON保存后加载"""
        path = save_design(design, temp_dir / "design.json")
        loaded = load_design(path)
        assert loaded.to_storage() == design.to_storage()

    def test_save_and_load_yaml_keeps_hidden_sections(self, temp_dir, design: LabelDesign):
        """测试隐藏分区内的元素在保存后保留"""
        design.elements.append(TextElement(id="footer-note", section_id="footer", content="Note"))
        path = save_design(design, temp_dir / "design.yaml")
        loaded = load_design(path)
        assert any(el.id == "footer-note" for el in loaded.elements)

    def test_load_template_wrapper(self, temp_dir, design: LabelDesign):
        """测试兼容 {design: {...}} 包装格式"""
        path = temp_dir / "template.yaml"
        path.write_text(yaml.safe_dump({"id": "t1", "design": design.to_storage()}), encoding="utf-8")
        assert len(load_design(path).elements) == len(design.elements)

    def test_load_missing_file(self, temp_dir):
        """测试文件不存在"""
        with pytest.raises(DesignLoadError):
            load_design(temp_dir / "nope.json")

    def test_load_invalid_design(self, temp_dir):
        """测试结构无效"""
        path = temp_dir / "bad.json"
        path.write_text('{"elements": [{"type": "unknown", "id": "x"}]}', encoding="utf-8")
        with pytest.raises(DesignLoadError):
            load_design(path)


class TestLoggingSetup:
    """日志初始化测试"""

    def test_configure_logging_to_file(self, temp_dir):
        """测试日志写入文件"""
        configure_logging(LoggingConfig(log_level="debug", log_to_file=True, log_file="run.log"), log_dir=temp_dir)
        try:
            logging.getLogger("masterlabel.test").debug("hello")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "hello" in (temp_dir / "run.log").read_text(encoding="utf-8")
        finally:
            configure_logging(LoggingConfig())

    def test_invalid_runtime_yaml(self, temp_dir):
        """测试运行期配置解析失败"""
        path = temp_dir / "label_runtime.yaml"
        path.write_text("runtime_options: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            RuntimeConfig.from_yaml(path)
