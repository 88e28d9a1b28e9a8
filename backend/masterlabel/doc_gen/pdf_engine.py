"""
PDF引擎 - 页面布局绘制为PDF字节流

职责：
1. 按页面布局绘制分区背景、元素块、分区底边框
2. 多份副本顺序写入同一文档（单文档多页模式）
3. PDF页数计算

依赖：
- reportlab: PDF绘制
- pdfplumber: 页数读取

测试要点：
- test_paint_single_page: 单页文档可被读取
- test_count_pdf_pages: 页数与布局一致
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

import pdfplumber
from reportlab.pdfgen.canvas import Canvas

from ..interfaces import ExportError, RenderError
from ..models import LabelDesign
from .elements import to_color
from .pagination import BORDER_WIDTH, PageLayout

logger = logging.getLogger(__name__)

PDF_CREATOR = "masterlabel"


class PDFPainter:
    """PDF绘制器"""

    def __init__(self, design: LabelDesign, title: str = ""):
        self.design = design
        self.title = title

    def paint(self, copies: list[list[PageLayout]]) -> tuple[bytes, int]:
        """
        绘制文档

        Args:
            copies: 每份副本的页面布局（顺序写入）

        Returns:
            (PDF字节, 页数)
        """
        buffer = BytesIO()
        d = self.design
        c = Canvas(buffer, pagesize=(d.page_width, d.page_height))
        c.setCreator(PDF_CREATOR)
        if self.title:
            c.setTitle(self.title)

        page_count = 0
        try:
            for pages in copies:
                for page in pages:
                    self._paint_page(c, page)
                    c.showPage()
                    page_count += 1
            c.save()
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise RenderError(f"PDF绘制失败: {e}") from e

        return buffer.getvalue(), page_count

    def _paint_page(self, c: Canvas, page: PageLayout) -> None:
        d = self.design
        background = to_color(d.background_color)
        if background is not None:
            c.setFillColor(background)
            c.rect(0, 0, d.page_width, d.page_height, stroke=0, fill=1)

        x = d.padding
        width = d.page_width - 2 * d.padding
        y = d.page_height - d.padding

        for piece in page.slices:
            section = piece.section
            height = piece.height
            section_bg = to_color(section.background_color)
            if section_bg is not None:
                c.setFillColor(section_bg)
                c.rect(x, y - height, width, height, stroke=0, fill=1)

            cursor = y - (section.padding_top if piece.is_first else 0.0)
            for block in piece.blocks:
                c.saveState()
                block.draw(c, x, cursor, width)
                c.restoreState()
                cursor -= block.height

            if piece.is_last and section.show_border:
                border = to_color(section.border_color)
                if border is not None:
                    c.setStrokeColor(border)
                    c.setLineWidth(BORDER_WIDTH)
                    line_y = y - height + BORDER_WIDTH / 2
                    c.line(x, line_y, x + width, line_y)

            y -= height + (piece.gap if piece.is_last else 0.0)


def count_pdf_pages(source: bytes | Path) -> int:
    """计算PDF页数"""
    if isinstance(source, Path):
        if not source.exists():
            raise ExportError(f"PDF文件不存在: {source}")
        with pdfplumber.open(str(source)) as pdf:
            return len(pdf.pages)
    with pdfplumber.open(BytesIO(source)) as pdf:
        return len(pdf.pages)
