"""
分页计算 - 分区 + 元素块高度 → 页面布局

规则：
- 元素块不可拆分；一页至少放置一个块（超高块独占一页，超出部分裁切）
- 分区放不下时在下一页续排，续排片段标记 is_partial
- 分区尾部（下内边距、边框、分区间距）不触发换页
- 至少产出一页
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import LabelSection
from .elements import ElementBlock

BORDER_WIDTH = 0.5


@dataclass
class SectionSlice:
    """分区在某一页上的片段"""
    section: LabelSection
    blocks: list[ElementBlock] = field(default_factory=list)
    is_first: bool = True   # 含分区起始（上内边距）
    is_last: bool = False   # 含分区结尾（下内边距/边框/间距）
    is_partial: bool = False
    gap: float = 0.0

    @property
    def height(self) -> float:
        """片段高度（不含分区间距）"""
        h = sum(b.height for b in self.blocks)
        if self.is_first:
            h += self.section.padding_top
        if self.is_last:
            h += self.section.padding_bottom
            if self.section.show_border:
                h += BORDER_WIDTH
        return h


@dataclass
class PageLayout:
    """单页布局"""
    index: int
    slices: list[SectionSlice] = field(default_factory=list)

    @property
    def used_height(self) -> float:
        return sum(s.height + (s.gap if s.is_last else 0) for s in self.slices)


def paginate(
    sections: list[tuple[LabelSection, list[ElementBlock]]],
    content_height: float,
    section_gap: float = 4.0,
    bordered_section_gap: float = 8.0,
) -> list[PageLayout]:
    """
    计算分页布局

    Args:
        sections: 按顺序排列的 (分区, 元素块) 列表（空分区应已剔除）
        content_height: 页面内容区高度（页高减上下页边距）
        section_gap: 无边框分区的间距
        bordered_section_gap: 有边框分区的间距

    Returns:
        页面布局列表（至少一页）
    """
    pages = [PageLayout(index=0)]
    used = 0.0

    for section, blocks in sections:
        if not blocks:
            continue
        gap = bordered_section_gap if section.show_border else section_gap
        current: SectionSlice | None = None

        for i, block in enumerate(blocks):
            lead = section.padding_top if i == 0 else 0.0
            needed = block.height + (lead if current is None else 0.0)
            if used + needed > content_height and pages[-1].slices:
                if current is not None:
                    current.is_partial = True
                pages.append(PageLayout(index=len(pages)))
                used = 0.0
                current = None

            if current is None:
                current = SectionSlice(section=section, is_first=i == 0, is_partial=i > 0, gap=gap)
                pages[-1].slices.append(current)
                used += lead
            current.blocks.append(block)
            used += block.height

        current.is_last = True
        used += section.padding_bottom + (BORDER_WIDTH if section.show_border else 0.0) + gap

    return pages
