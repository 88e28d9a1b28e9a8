"""
批量导出单元测试

每个模块完成后必须运行：pytest tests/unit/test_batch_export.py -v
"""

from datetime import date

import pytest

from masterlabel.config import RenderConfig
from masterlabel.doc_gen import (
    BatchExporter,
    DocumentRenderer,
    check_export_config,
    copy_filename,
    range_filename,
    single_filename,
)
from masterlabel.doc_gen.batch_export import iter_counter_copies
from masterlabel.interfaces import BatchExportError
from masterlabel.models import (
    IdentitySection,
    MasterLabelData,
    MultiLabelExportConfig,
    PackageCounterElement,
    PackageCounterFormat,
)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def renderer(sleeps) -> DocumentRenderer:
    return DocumentRenderer(RenderConfig(), delay_ms=300, sleep=sleeps.append, today=lambda: date(2024, 5, 1))


@pytest.fixture
def counter_design(design):
    design.elements.append(PackageCounterElement(id="counter", section_id="identity", sort_order=-1))
    return design


class TestFilenames:
    """文件名测试"""

    def test_single_filename(self, label_data):
        assert single_filename(label_data, date(2024, 1, 2)) == "master-label-4006381333931-LOT-2024-001-2024-01-02.pdf"

    def test_batch_filenames_zero_padded(self, label_data):
        """测试文件名序号补零"""
        assert copy_filename(label_data, 5, 12) == "master-label-4006381333931-LOT-2024-001-005-of-012.pdf"

    def test_range_filename(self, label_data):
        assert range_filename(label_data, 1, 20) == "master-label-4006381333931-LOT-2024-001-1-to-20.pdf"

    def test_missing_identity_placeholders(self, label_data):
        """测试缺失SKU/批号时使用占位符"""
        data = label_data.model_copy(update={"identity": IdentitySection()})
        assert copy_filename(data, 1, 1) == "master-label-product-batch-001-of-001.pdf"

    def test_unsafe_characters_replaced(self, label_data):
        """测试文件名中的不安全字符"""
        identity = label_data.identity.model_copy(update={"batch_number": "LOT 2024/01"})
        data = label_data.model_copy(update={"identity": identity})
        assert copy_filename(data, 1, 2) == "master-label-4006381333931-LOT_2024_01-001-of-002.pdf"


class TestCounterCopies:
    """计数副本测试"""

    def test_counter_sequence(self, label_data: MasterLabelData):
        """测试 labelCount=3, startNumber=5 → (5,7),(6,7),(7,7)"""
        config = MultiLabelExportConfig(label_count=3, start_number=5)
        copies = iter_counter_copies(label_data, config)
        assert [(c.counter.current, c.counter.total) for c in copies] == [(5, 7), (6, 7), (7, 7)]
        assert label_data.counter is None

    def test_counter_carries_format_and_locale(self, label_data: MasterLabelData):
        config = MultiLabelExportConfig(label_count=2, format="parcel-x-of-y", locale="de")
        copies = iter_counter_copies(label_data, config)
        assert copies[0].counter.format == PackageCounterFormat.PARCEL_X_OF_Y
        assert copies[0].counter.locale == "de"

    def test_empty_locale_uses_default(self, label_data: MasterLabelData):
        """测试未指定语言时取运行期默认语言"""
        config = MultiLabelExportConfig(label_count=2)
        assert config.locale == ""
        assert iter_counter_copies(label_data, config)[0].counter.locale == "en"
        assert iter_counter_copies(label_data, config, "de")[1].counter.locale == "de"
        explicit = MultiLabelExportConfig(label_count=2, locale="en")
        assert iter_counter_copies(label_data, explicit, "de")[0].counter.locale == "en"

    def test_renderer_passes_default_locale(self, design, label_data, monkeypatch):
        """测试渲染器把 RenderConfig.default_locale 交给批量导出器"""
        captured = {}

        class SpyExporter:
            def __init__(self, renderer, **kwargs):
                captured.update(kwargs)

            def export(self, design, data, config, sink=None):
                return []

        monkeypatch.setattr("masterlabel.doc_gen.renderer.BatchExporter", SpyExporter)
        renderer = DocumentRenderer(RenderConfig(default_locale="de"), delay_ms=0)
        renderer.render(design, label_data, MultiLabelExportConfig(label_count=2))
        assert captured["default_locale"] == "de"


class TestCheckExportConfig:
    """导出配置提示测试"""

    def test_valid_config(self):
        errors, warnings = check_export_config(MultiLabelExportConfig(label_count=5), True)
        assert errors == [] and warnings == []

    def test_no_counter_element_warning(self):
        """测试多份但无计数元素时提示"""
        _, warnings = check_export_config(MultiLabelExportConfig(label_count=2), False)
        assert warnings == ["ml.export.validation.noCounterElement"]

    def test_many_files_warning_only_for_batch(self):
        """测试大量文件提示仅针对逐份模式"""
        _, warnings = check_export_config(MultiLabelExportConfig(label_count=51), True)
        assert "ml.export.validation.manyFiles" in warnings
        _, warnings = check_export_config(MultiLabelExportConfig(label_count=51, filename_pattern="single"), True)
        assert warnings == []

    def test_bounds_errors(self):
        """测试越界配置（绕过模型校验构造）"""
        config = MultiLabelExportConfig.model_construct(
            label_count=0, start_number=0, format=PackageCounterFormat.X_OF_Y,
            filename_pattern="batch", locale="en",
        )
        errors, _ = check_export_config(config, True)
        assert errors == ["ml.export.validation.minCount", "ml.export.validation.minStart"]

    def test_configured_max(self):
        errors, _ = check_export_config(MultiLabelExportConfig(label_count=20), True, max_label_count=10)
        assert errors == ["ml.export.validation.maxCount"]


class TestBatchExporter:
    """批量导出测试"""

    def test_export_each(self, renderer, counter_design, label_data, sleeps):
        """测试逐份导出：每份一个PDF，按序号递增"""
        config = MultiLabelExportConfig(label_count=3, start_number=5)
        documents = renderer.render(counter_design, label_data, config)
        assert [d.copy_index for d in documents] == [5, 6, 7]
        assert documents[0].filename.endswith("-005-of-007.pdf")
        assert all(d.page_count == 1 for d in documents)
        # 首份之前不等待
        assert sleeps == [0.3, 0.3]

    def test_no_delay_when_zero(self, counter_design, label_data, sleeps):
        """测试 delay_ms=0 时不调用sleep"""
        renderer = DocumentRenderer(RenderConfig(), delay_ms=0, sleep=sleeps.append)
        renderer.render(counter_design, label_data, MultiLabelExportConfig(label_count=3))
        assert sleeps == []

    def test_export_single_document(self, renderer, counter_design, label_data, sleeps):
        """测试单文档多页模式"""
        config = MultiLabelExportConfig(label_count=4, start_number=1, filename_pattern="single")
        documents = renderer.render(counter_design, label_data, config)
        assert len(documents) == 1
        assert documents[0].filename.endswith("-1-to-4.pdf")
        assert documents[0].page_count == 4
        assert sleeps == []

    def test_counter_rendered_per_copy(self, renderer, counter_design, label_data):
        """测试每份副本都包含计数块"""
        exporter = BatchExporter(renderer, delay_ms=0)
        copies = iter_counter_copies(label_data, MultiLabelExportConfig(label_count=2, format="box-x-of-y"))
        texts = []
        for copy in copies:
            _, blocks = renderer.build_sections(counter_design, copy)[0]
            texts.append(blocks[0].texts[0])
        assert texts == ["Box 1 of 2", "Box 2 of 2"]
        assert len(exporter.export(counter_design, label_data, MultiLabelExportConfig(label_count=2))) == 2

    def test_sink_receives_in_order(self, renderer, counter_design, label_data):
        """测试交付顺序"""
        received = []
        renderer.render(counter_design, label_data, MultiLabelExportConfig(label_count=3), sink=received.append)
        assert [d.copy_index for d in received] == [1, 2, 3]

    def test_sink_failure_stops_batch(self, renderer, counter_design, label_data):
        """测试中途失败携带已完成文档"""
        received = []

        def sink(document):
            if document.copy_index == 3:
                raise OSError("disk full")
            received.append(document)

        with pytest.raises(BatchExportError) as exc_info:
            renderer.render(counter_design, label_data, MultiLabelExportConfig(label_count=5), sink=sink)

        assert exc_info.value.failed_index == 3
        assert [d.copy_index for d in exc_info.value.completed] == [1, 2]
        assert len(received) == 2

    def test_single_mode_sink_failure(self, renderer, counter_design, label_data):
        """测试单文档模式交付失败"""
        def sink(document):
            raise OSError("read-only")

        config = MultiLabelExportConfig(label_count=2, start_number=7, filename_pattern="single")
        with pytest.raises(BatchExportError) as exc_info:
            renderer.render(counter_design, label_data, config, sink=sink)
        assert exc_info.value.failed_index == 7
        assert exc_info.value.completed == []
