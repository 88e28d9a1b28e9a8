"""
文档渲染单元测试

每个模块完成后必须运行：pytest tests/unit/test_renderer.py -v
"""

import random
from datetime import date

import pytest

from masterlabel.config import RenderConfig
from masterlabel.doc_gen import DocumentRenderer, count_pdf_pages
from masterlabel.interfaces import ExportError, RenderError
from masterlabel.models import (
    FieldValueElement,
    LabelDesign,
    LabelSectionId,
    MasterLabelData,
    MultiLabelExportConfig,
    PackageCounterElement,
    SpacerElement,
    TextElement,
)


@pytest.fixture
def renderer() -> DocumentRenderer:
    return DocumentRenderer(RenderConfig(), delay_ms=0, today=lambda: date(2024, 5, 1))


def _section_ids(renderer: DocumentRenderer, design: LabelDesign, data: MasterLabelData) -> list[str]:
    return [section.id.value for section, _ in renderer.build_sections(design, data)]


class TestBuildSections:
    """分区构建测试"""

    def test_section_order(self, renderer, design, label_data):
        """测试分区按 sort_order 排列"""
        assert _section_ids(renderer, design, label_data) == ["identity", "dpp", "compliance", "sustainability"]
        design.sections[0].sort_order = 99
        assert _section_ids(renderer, design, label_data)[-1] == "identity"

    def test_hidden_section_skipped(self, renderer, design, label_data):
        """测试不可见分区不渲染（元素保留在设计中）"""
        design.elements.append(TextElement(id="note", section_id="footer", content="Footer note"))
        assert "footer" not in _section_ids(renderer, design, label_data)
        assert any(el.id == "note" for el in design.elements)

        footer = next(s for s in design.sections if s.id == LabelSectionId.FOOTER)
        footer.visible = True
        assert _section_ids(renderer, design, label_data)[-1] == "footer"

    def test_collapsed_section_still_rendered(self, renderer, design, label_data):
        """测试折叠状态不影响渲染"""
        design.sections[0].collapsed = True
        assert "identity" in _section_ids(renderer, design, label_data)

    def test_empty_section_suppressed(self, renderer, design, label_data):
        """测试全空分区不出现在布局中"""
        design.elements = [el for el in design.elements if el.section_id != LabelSectionId.COMPLIANCE]
        design.elements.append(
            FieldValueElement(id="eprel", section_id="compliance", field_key="eprelNumber")
        )
        assert "compliance" not in _section_ids(renderer, design, label_data)

    def test_elements_in_sort_order(self, renderer, design, label_data):
        """测试元素按 sort_order 排列"""
        design.elements.append(TextElement(id="first", section_id="identity", content="First", sort_order=-1))
        _, blocks = renderer.build_sections(design, label_data)[0]
        assert blocks[0].element_id == "first"

    @pytest.mark.parametrize("seed", range(5))
    def test_shuffled_design_sorted(self, renderer, design, label_data, seed):
        """测试打乱 sections/elements 数组及 sort_order 后输出仍按 sort_order 升序"""
        rng = random.Random(seed)
        section_orders = list(range(len(design.sections)))
        rng.shuffle(section_orders)
        for section, order in zip(design.sections, section_orders):
            section.sort_order = order
        element_orders = list(range(len(design.elements)))
        rng.shuffle(element_orders)
        for element, order in zip(design.elements, element_orders):
            element.sort_order = order
        rng.shuffle(design.sections)
        rng.shuffle(design.elements)

        section_order = {s.id: s.sort_order for s in design.sections}
        element_order = {el.id: el.sort_order for el in design.elements}
        built = renderer.build_sections(design, label_data)

        rendered = [section.sort_order for section, _ in built]
        assert rendered == sorted(rendered)
        expected = sorted((s.id for s in design.sections if s.visible), key=section_order.get)
        assert [section.id for section, _ in built] == expected
        for section, blocks in built:
            orders = [element_order[block.element_id] for block in blocks]
            assert orders == sorted(orders), section.id
            assert all(
                next(el for el in design.elements if el.id == block.element_id).section_id == section.id
                for block in blocks
            )

    def test_counter_not_rendered_without_context(self, renderer, design, label_data):
        """测试单份模式下 package-counter 不渲染"""
        design.elements.append(PackageCounterElement(id="counter", section_id="identity"))
        _, blocks = renderer.build_sections(design, label_data)[0]
        assert "counter" not in [b.element_id for b in blocks]


class TestRenderSingle:
    """单份渲染测试"""

    def test_render_single_document(self, renderer, design, label_data):
        """测试单份模式文件名含日期"""
        documents = renderer.render(design, label_data)
        assert len(documents) == 1
        doc = documents[0]
        assert doc.filename == "master-label-4006381333931-LOT-2024-001-2024-05-01.pdf"
        assert doc.content.startswith(b"%PDF")
        assert doc.page_count == 1
        assert doc.copy_index is None

    def test_single_count_means_single_mode(self, renderer, design, label_data):
        """测试 labelCount=1 视为单份模式"""
        documents = renderer.render(design, label_data, MultiLabelExportConfig(label_count=1, start_number=9))
        assert documents[0].filename.endswith("-2024-05-01.pdf")

    def test_sink_called(self, renderer, design, label_data):
        """测试单份模式也交付到sink"""
        received = []
        renderer.render(design, label_data, sink=received.append)
        assert [d.filename for d in received] == [renderer.render(design, label_data)[0].filename]

    def test_page_count_matches_pdf(self, renderer, design, label_data):
        """测试页数与PDF一致"""
        design.elements.extend(
            SpacerElement(id=f"s{i}", section_id="sustainability", height=150, sort_order=100 + i)
            for i in range(4)
        )
        doc = renderer.render(design, label_data)[0]
        assert doc.page_count > 1
        assert count_pdf_pages(doc.content) == doc.page_count

    def test_empty_design_renders_one_page(self, renderer, label_data):
        """测试空设计仍产出一页"""
        doc = renderer.render(LabelDesign(), label_data)[0]
        assert doc.page_count == 1

    def test_render_document_requires_copies(self, renderer, design):
        """测试无副本时报错"""
        with pytest.raises(RenderError):
            renderer.render_document(design, [], "x.pdf")


class TestCountPdfPages:
    """PDF页数测试"""

    def test_count_from_path(self, renderer, design, label_data, temp_dir):
        """测试从文件读取页数"""
        doc = renderer.render(design, label_data)[0]
        path = temp_dir / doc.filename
        path.write_bytes(doc.content)
        assert count_pdf_pages(path) == 1

    def test_missing_file(self, temp_dir):
        """测试文件不存在"""
        with pytest.raises(ExportError):
            count_pdf_pages(temp_dir / "missing.pdf")
