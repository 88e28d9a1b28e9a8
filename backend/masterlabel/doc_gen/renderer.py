"""
文档渲染器 - 设计 + 数据快照 → PDF文档

职责：
1. 按 sort_order 遍历可见分区及其元素，构建元素块
2. 跳过解析为空的元素；无任何元素的分区整体不渲染（含边框与间距）
3. 分页并绘制PDF
4. 单份模式与批量导出模式分派

约定：
- 渲染器不拒绝任何设计：结构问题由校验器报告
- labelCount ≤ 1 或无导出配置时为单份模式（不注入计数，package-counter 不渲染）

测试要点：
- test_render_single_document: 单份模式文件名含日期
- test_empty_section_suppressed: 全空分区不出现在布局中
- test_hidden_section_skipped: 不可见分区不渲染
- test_section_order: 分区按 sort_order 排列
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Callable

from ..config import RenderConfig, get_config
from ..interfaces import IDocumentRenderer, IDocumentSink, RenderError
from ..models import (
    LabelDesign,
    LabelSection,
    MasterLabelData,
    MultiLabelExportConfig,
    RenderedDocument,
)
from .batch_export import BatchExporter, single_filename
from .elements import ElementBlock, RenderContext, build_element_block
from .pagination import PageLayout, paginate
from .pdf_engine import PDFPainter

logger = logging.getLogger(__name__)


class DocumentRenderer(IDocumentRenderer):
    """文档渲染器实现"""

    def __init__(
        self,
        render_config: RenderConfig | None = None,
        delay_ms: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ):
        config = get_config()
        self.render_config = render_config or config.render
        self.delay_ms = config.batch_export.delay_ms if delay_ms is None else delay_ms
        self.sleep = sleep
        self.today = today

    def render(
        self,
        design: LabelDesign,
        data: MasterLabelData,
        export_config: MultiLabelExportConfig | None = None,
        sink: IDocumentSink | None = None,
    ) -> list[RenderedDocument]:
        """渲染标签文档（单份或批量）"""
        if export_config is None or export_config.label_count <= 1:
            document = self.render_document(design, [data], single_filename(data, self.today()))
            if sink is not None:
                sink(document)
            return [document]

        exporter = BatchExporter(
            self,
            delay_ms=self.delay_ms,
            sleep=self.sleep,
            default_locale=self.render_config.default_locale,
        )
        return exporter.export(design, data, export_config, sink=sink)

    def render_document(
        self,
        design: LabelDesign,
        copies: list[MasterLabelData],
        filename: str,
    ) -> RenderedDocument:
        """将一份或多份数据快照按顺序渲染为一个PDF"""
        if not copies:
            raise RenderError("没有可渲染的数据")
        layouts = [self.layout(design, data) for data in copies]
        content, page_count = PDFPainter(design, title=filename).paint(layouts)
        logger.info(f"渲染完成: {filename} ({page_count}页)")
        return RenderedDocument(filename=filename, content=content, page_count=page_count)

    def layout(self, design: LabelDesign, data: MasterLabelData) -> list[PageLayout]:
        """计算单份数据的页面布局"""
        sections = self.build_sections(design, data)
        content_height = design.page_height - 2 * design.padding
        return paginate(
            sections,
            content_height,
            section_gap=self.render_config.section_gap,
            bordered_section_gap=self.render_config.bordered_section_gap,
        )

    def build_sections(
        self,
        design: LabelDesign,
        data: MasterLabelData,
    ) -> list[tuple[LabelSection, list[ElementBlock]]]:
        """构建可见且非空分区的元素块"""
        ctx = RenderContext(
            design=design,
            data=data,
            width=design.page_width - 2 * design.padding,
        )
        result: list[tuple[LabelSection, list[ElementBlock]]] = []
        for section in design.sorted_sections():
            if not section.visible:
                continue
            blocks = [
                block
                for element in design.elements_in(section.id)
                if (block := build_element_block(element, ctx)) is not None
            ]
            if blocks:
                result.append((section, blocks))
            else:
                logger.debug(f"分区无可渲染元素，跳过: {section.id.value}")
        return result
