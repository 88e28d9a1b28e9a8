"""
分页计算单元测试

每个模块完成后必须运行：pytest tests/unit/test_pagination.py -v
"""

import pytest

from masterlabel.doc_gen import paginate
from masterlabel.doc_gen.elements import ElementBlock
from masterlabel.doc_gen.pagination import BORDER_WIDTH
from masterlabel.models import LabelSection


def _block(height: float, name: str = "b") -> ElementBlock:
    return ElementBlock(name, "spacer", height, lambda c, x, top, width: None)


def _section(section_id: str, **kwargs) -> LabelSection:
    return LabelSection(id=section_id, padding_top=0, padding_bottom=0, **kwargs)


class TestPaginate:
    """分页测试"""

    def test_at_least_one_page(self):
        """测试无内容时仍产出一页"""
        pages = paginate([], 100)
        assert len(pages) == 1
        assert pages[0].slices == []

    def test_fits_single_page(self):
        """测试内容放得下时单页"""
        sections = [(_section("identity"), [_block(20), _block(20)]), (_section("dpp"), [_block(30)])]
        pages = paginate(sections, 100, section_gap=4)
        assert len(pages) == 1
        assert [s.section.id.value for s in pages[0].slices] == ["identity", "dpp"]
        assert all(s.is_first and s.is_last and not s.is_partial for s in pages[0].slices)

    def test_section_continues_on_next_page(self):
        """测试分区放不下时续排并标记 is_partial"""
        sections = [(_section("identity"), [_block(40, "a"), _block(40, "b"), _block(40, "c")])]
        pages = paginate(sections, 100)
        assert len(pages) == 2
        first, second = pages[0].slices[0], pages[1].slices[0]
        assert [b.element_id for b in first.blocks] == ["a", "b"]
        assert [b.element_id for b in second.blocks] == ["c"]
        assert first.is_first and first.is_partial and not first.is_last
        assert not second.is_first and second.is_partial and second.is_last

    def test_oversized_block_alone_on_page(self):
        """测试超高块独占一页"""
        sections = [(_section("identity"), [_block(150, "big"), _block(10, "small")])]
        pages = paginate(sections, 100)
        assert [b.element_id for b in pages[0].slices[0].blocks] == ["big"]
        assert [b.element_id for b in pages[1].slices[0].blocks] == ["small"]

    def test_section_tail_does_not_break(self):
        """测试分区尾部（内边距/间距）不触发换页"""
        sections = [
            (_section("identity", show_border=True), [_block(95)]),
            (_section("dpp"), [_block(5)]),
        ]
        pages = paginate(sections, 100)
        # 第一分区尾部（边框+间距）占用后第二分区放不下
        assert len(pages) == 2
        assert pages[0].slices[0].is_last

    def test_new_section_starts_new_page_unsplit(self):
        """测试整体换页的分区不标记 is_partial"""
        sections = [(_section("identity"), [_block(90)]), (_section("dpp"), [_block(20)])]
        pages = paginate(sections, 100)
        moved = pages[1].slices[0]
        assert moved.is_first and moved.is_last and not moved.is_partial

    def test_padding_and_border_in_height(self):
        """测试片段高度含内边距与边框"""
        section = LabelSection(id="identity", padding_top=3, padding_bottom=6, show_border=True)
        pages = paginate([(section, [_block(10)])], 100, bordered_section_gap=8)
        piece = pages[0].slices[0]
        assert piece.height == pytest.approx(3 + 10 + 6 + BORDER_WIDTH)
        assert piece.gap == 8
        assert pages[0].used_height == pytest.approx(piece.height + 8)

    def test_empty_blocks_skipped(self):
        """测试无块分区不出现在布局中"""
        pages = paginate([(_section("identity"), []), (_section("dpp"), [_block(5)])], 100)
        assert [s.section.id.value for s in pages[0].slices] == ["dpp"]
