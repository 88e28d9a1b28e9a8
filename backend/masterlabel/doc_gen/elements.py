"""
元素块构建 - 元素 + 标签数据 → 可测高度的原子绘制块

职责：
1. 按元素 type 分派到对应构建函数
2. 解析元素内容（字段值/二维码/图形/材料代码/条码/计数）
3. 计算块高度（分页用）并提供绘制回调

约定：
- 构建函数返回 None 表示该元素解析为空，渲染时整体跳过
- 未知图形id、无法解码的图片等引用问题只记录日志，不中断文档
- 块坐标：x 为内容区左边界，top 为块顶部（PDF坐标，向上为正）

测试要点：
- test_field_value_empty_skipped: 空字段值不产生块
- test_qr_without_image_keeps_caption: 无二维码时仍渲染说明文字
- test_unknown_pictogram_skipped: 未知图形静默跳过
- test_material_code_auto_populate: 自动填充优先派生代码
- test_package_counter_requires_context: 无计数上下文不渲染
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.lib.colors import Color, HexColor, white
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen.canvas import FILL_NON_ZERO, Canvas

from ..assembly.dpp import decode_data_url
from ..models import (
    BarcodeElement,
    ComplianceBadgeElement,
    DividerElement,
    FieldValueElement,
    IconTextElement,
    ImageElement,
    LabelDesign,
    LabelElementBase,
    MasterLabelData,
    MaterialCodeElement,
    PackageCounterElement,
    PictogramElement,
    QRCodeElement,
    SpacerElement,
    TextElement,
)
from .counter import format_package_counter
from .field_resolver import resolve_field_value
from .fonts import resolve_font, text_width, truncate_text, wrap_text
from .pictograms import get_builtin_pictogram
from .svg_path import parse_svg_path, parse_view_box

logger = logging.getLogger(__name__)

Painter = Callable[[Canvas, float, float, float], None]

LINE_HEIGHT = 1.2
INLINE_LABEL_WIDTH = 65.0
MUTED_COLOR = "#6b7280"
BARCODE_NAMES = {"ean13": "EAN13", "code128": "Code128", "code39": "Standard39"}


@dataclass
class RenderContext:
    """渲染上下文"""
    design: LabelDesign
    data: MasterLabelData
    width: float  # 内容区宽度


@dataclass
class ElementBlock:
    """原子绘制块（分页时不可拆分）"""
    element_id: str
    element_type: str
    height: float
    draw: Painter = field(repr=False)
    texts: list[str] = field(default_factory=list)


# ============================================================================
# 绘制辅助
# ============================================================================

def to_color(value: str | None) -> Color | None:
    """解析颜色（透明/无效返回None）"""
    if not value or value.lower() in ("transparent", "none"):
        return None
    try:
        return HexColor(value, hasAlpha=len(value) == 9)
    except ValueError:
        logger.debug(f"无法解析颜色: {value}")
        return None


def align_x(x: float, width: float, item_width: float, alignment: str) -> float:
    """按对齐方式计算起点x"""
    if alignment == "center":
        return x + (width - item_width) / 2
    if alignment == "right":
        return x + width - item_width
    return x


def draw_lines(
    c: Canvas,
    lines: list[str],
    font: str,
    size: float,
    color: str | None,
    x: float,
    top: float,
    width: float,
    alignment: str = "left",
    line_height: float = LINE_HEIGHT,
) -> None:
    """逐行绘制文本"""
    fill = to_color(color) or HexColor("#1a1a1a")
    lh = size * line_height
    c.setFont(font, size)
    c.setFillColor(fill)
    for i, line in enumerate(lines):
        baseline = top - i * lh - (lh - size) / 2 - size * 0.8
        lx = align_x(x, width, text_width(line, font, size), alignment)
        c.drawString(lx, baseline, line)


def lines_height(lines: list[str], size: float, line_height: float = LINE_HEIGHT) -> float:
    return len(lines) * size * line_height


# ============================================================================
# 各类型构建函数
# ============================================================================

def build_text(el: TextElement, ctx: RenderContext) -> ElementBlock | None:
    content = el.content.upper() if el.uppercase else el.content
    if not content:
        return None
    font = resolve_font(ctx.design.font_family, el.font_weight == "bold", el.italic)
    lines = wrap_text(content, font, el.font_size, ctx.width)

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        draw_lines(c, lines, font, el.font_size, el.color, x, top, width, el.alignment)

    return ElementBlock(el.id, el.type, lines_height(lines, el.font_size) + 2, draw, lines)


def build_field_value(el: FieldValueElement, ctx: RenderContext) -> ElementBlock | None:
    raw = resolve_field_value(el.field_key, ctx.data)
    if not raw:
        return None
    value = raw.upper() if el.uppercase else raw
    font = resolve_font(el.font_family or ctx.design.font_family, el.font_weight == "bold", el.italic)
    caption = (el.label_text or el.field_key) if el.show_label else ""
    label_font = resolve_font(ctx.design.font_family)

    if el.layout == "stacked":
        label_size = max(el.font_size - 1, 1)
        label_lines = wrap_text(caption, label_font, label_size, ctx.width) if caption else []
        value_lines = wrap_text(value, font, el.font_size, ctx.width)
        label_h = lines_height(label_lines, label_size) + (1 if label_lines else 0)
        height = label_h + lines_height(value_lines, el.font_size, el.line_height) + el.margin_bottom

        def draw(c: Canvas, x: float, top: float, width: float) -> None:
            if label_lines:
                draw_lines(c, label_lines, label_font, label_size, el.label_color, x, top, width, el.alignment)
            draw_lines(
                c, value_lines, font, el.font_size, el.color, x, top - label_h, width,
                el.alignment, el.line_height,
            )

        return ElementBlock(el.id, el.type, height, draw, label_lines + value_lines)

    label_size = max(el.font_size - 0.5, 1)
    label_w = INLINE_LABEL_WIDTH if caption else 0.0
    value_width = max(ctx.width - label_w, 1)
    # 行内标签固定单行
    label_lines = [truncate_text(caption, label_font, label_size, INLINE_LABEL_WIDTH)] if caption else []
    value_lines = wrap_text(value, font, el.font_size, value_width)
    value_w = max(text_width(line, font, el.font_size) for line in value_lines)
    row_h = max(lines_height(label_lines, label_size), lines_height(value_lines, el.font_size, el.line_height))

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        start = align_x(x, width, label_w + min(value_w, value_width), el.alignment)
        if label_lines:
            draw_lines(c, label_lines, label_font, label_size, el.label_color, start, top, label_w)
        draw_lines(
            c, value_lines, font, el.font_size, el.color, start + label_w, top, value_width,
            "left", el.line_height,
        )

    return ElementBlock(el.id, el.type, row_h + el.margin_bottom, draw, label_lines + value_lines)


def build_qr_code(el: QRCodeElement, ctx: RenderContext) -> ElementBlock | None:
    qr_bytes = decode_data_url(ctx.data.dpp_qr.qr_data_url)
    image = None
    if qr_bytes:
        try:
            image = ImageReader(BytesIO(qr_bytes))
        except (OSError, ValueError) as e:
            logger.warning(f"二维码图片无法解码，仅渲染说明文字: {e}")

    img_w = el.size if image is not None else 0.0
    text_x_offset = img_w + 8 if image is not None else 0.0
    text_width_avail = max(ctx.width - text_x_offset, 1)

    label_font = resolve_font("Helvetica", bold=True)
    url_font = resolve_font("Helvetica")
    label_lines = wrap_text(el.label_text, label_font, 6, text_width_avail) if el.show_label else []
    url_lines = (
        wrap_text(ctx.data.dpp_qr.dpp_url, url_font, 4.5, text_width_avail)
        if el.show_url else []
    )
    if image is None and not label_lines and not url_lines:
        return None

    label_h = lines_height(label_lines, 6) + (2 if label_lines else 0)
    text_h = label_h + lines_height(url_lines, 4.5)
    height = max(img_w, text_h)

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        text_w = max(
            [text_width(line, label_font, 6) for line in label_lines]
            + [text_width(line, url_font, 4.5) for line in url_lines]
            + [0.0]
        )
        start = align_x(x, width, text_x_offset + min(text_w, text_width_avail), el.alignment)
        if image is not None:
            c.drawImage(image, start, top - el.size, width=el.size, height=el.size, mask="auto")
        # 文字列在图片右侧垂直居中
        text_top = top - (height - text_h) / 2
        tx = start + text_x_offset
        if label_lines:
            draw_lines(c, label_lines, label_font, 6, "#1a1a1a", tx, text_top, text_width_avail)
        if url_lines:
            draw_lines(c, url_lines, url_font, 4.5, MUTED_COLOR, tx, text_top - label_h, text_width_avail)

    return ElementBlock(el.id, el.type, height + 2, draw, label_lines + url_lines)


def draw_svg_path(c: Canvas, svg_path: str, view_box: str, x: float, top: float, scale: float, color: Color) -> None:
    """按 viewBox 缩放绘制SVG路径（y轴翻转）"""
    min_x, min_y, _, _ = parse_view_box(view_box)

    def tx(px: float) -> float:
        return x + (px - min_x) * scale

    def ty(py: float) -> float:
        return top - (py - min_y) * scale

    path = c.beginPath()
    for op in parse_svg_path(svg_path):
        kind = op[0]
        if kind == "M":
            path.moveTo(tx(op[1]), ty(op[2]))
        elif kind == "L":
            path.lineTo(tx(op[1]), ty(op[2]))
        elif kind == "C":
            path.curveTo(tx(op[1]), ty(op[2]), tx(op[3]), ty(op[4]), tx(op[5]), ty(op[6]))
        elif kind == "Z":
            path.close()
    c.setFillColor(color)
    c.drawPath(path, stroke=0, fill=1, fillMode=FILL_NON_ZERO)


def build_pictogram(el: PictogramElement, ctx: RenderContext) -> ElementBlock | None:
    pictogram = get_builtin_pictogram(el.pictogram_id) if el.source == "builtin" else None
    if pictogram is None:
        logger.debug(f"图形未找到，跳过: {el.source}:{el.pictogram_id}")
        return None

    _, _, vb_w, _ = parse_view_box(pictogram.view_box)
    icon_h = el.size * pictogram.aspect_ratio
    caption = el.label_text if el.show_label and el.label_text else ""
    caption_font = resolve_font("Helvetica")
    caption_h = 5 * LINE_HEIGHT + 1 if caption else 0.0
    color = to_color(el.color) or HexColor("#1a1a1a")

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        start = align_x(x, width, el.size, el.alignment)
        draw_svg_path(c, pictogram.svg_path, pictogram.view_box, start, top, el.size / vb_w, color)
        if caption:
            draw_lines(c, [caption], caption_font, 5, el.color, x, top - icon_h - 1, width, el.alignment)

    return ElementBlock(el.id, el.type, icon_h + caption_h + 2, draw, [caption] if caption else [])


def build_compliance_badge(el: ComplianceBadgeElement, ctx: RenderContext) -> ElementBlock | None:
    if not el.symbol:
        return None
    font = resolve_font("Helvetica", bold=True)
    box_w = max(24.0, text_width(el.symbol, font, el.size) + 8)
    box_h = el.size + 4
    module = ctx.data.get_module(el.badge_id)
    caption = module.label if el.show_label and module else ""
    caption_font = resolve_font("Helvetica")

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        caption_w = text_width(caption, caption_font, 5) + 4 if caption else 0.0
        start = align_x(x, width, box_w + caption_w, el.alignment)
        border = to_color(el.color) or HexColor("#1a1a1a")
        text_color: Color = border
        c.saveState()
        c.setLineWidth(0.75)
        c.setStrokeColor(border)
        if el.style == "filled":
            c.setFillColor(to_color(el.background_color) or border)
            c.roundRect(start, top - box_h, box_w, box_h, 2, stroke=1, fill=1)
            text_color = white
        elif el.style == "outlined":
            c.roundRect(start, top - box_h, box_w, box_h, 2, stroke=1, fill=0)
        c.restoreState()

        c.setFont(font, el.size)
        c.setFillColor(text_color)
        c.drawCentredString(start + box_w / 2, top - 2 - el.size * 0.8, el.symbol)
        if caption:
            draw_lines(c, [caption], caption_font, 5, el.color, start + box_w + 4, top - (box_h - 6) / 2, caption_w)

    return ElementBlock(el.id, el.type, box_h + 2, draw, [el.symbol] + ([caption] if caption else []))


def build_image(el: ImageElement, ctx: RenderContext) -> ElementBlock | None:
    if not el.src:
        return None
    raw = decode_data_url(el.src)
    if raw is None:
        logger.warning(f"图片仅支持 base64 data URL，跳过: {el.id}")
        return None
    try:
        image = ImageReader(BytesIO(raw))
        iw, ih = image.getSize()
    except (OSError, ValueError) as e:
        logger.warning(f"图片无法解码，跳过: {el.id}: {e}")
        return None

    img_w = ctx.width * max(min(el.width, 100), 1) / 100
    img_h = img_w * ih / iw if iw else img_w

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        start = align_x(x, width, img_w, el.alignment)
        c.saveState()
        if el.border_radius > 0:
            clip = c.beginPath()
            clip.roundRect(start, top - img_h, img_w, img_h, el.border_radius)
            c.clipPath(clip, stroke=0, fill=0)
        c.drawImage(image, start, top - img_h, width=img_w, height=img_h, mask="auto")
        c.restoreState()

    return ElementBlock(el.id, el.type, img_h + 2, draw, [el.alt] if el.alt else [])


def build_divider(el: DividerElement, ctx: RenderContext) -> ElementBlock | None:
    height = el.margin_top + el.thickness + el.margin_bottom

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        y = top - el.margin_top - el.thickness / 2
        c.saveState()
        c.setLineWidth(el.thickness)
        c.setStrokeColor(to_color(el.color) or HexColor("#d1d5db"))
        if el.style == "dashed":
            c.setDash([3, 2])
        elif el.style == "dotted":
            c.setLineCap(1)
            c.setDash([0.1, max(el.thickness * 2, 1)])
        c.line(x, y, x + width, y)
        c.restoreState()

    return ElementBlock(el.id, el.type, height, draw)


def build_spacer(el: SpacerElement, ctx: RenderContext) -> ElementBlock | None:
    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        return None

    return ElementBlock(el.id, el.type, max(el.height, 0), draw)


def build_material_code(el: MaterialCodeElement, ctx: RenderContext) -> ElementBlock | None:
    derived = list(ctx.data.sustainability.packaging_material_codes)
    codes = derived if el.auto_populate and derived else list(el.codes)
    if not codes:
        return None

    font = resolve_font("Helvetica")
    box_h = el.font_size + 2
    gap = 3.0
    widths = [text_width(code, font, el.font_size) + 6 for code in codes]

    # 按内容宽度流式换行
    rows: list[list[int]] = [[]]
    used = 0.0
    for i, w in enumerate(widths):
        if rows[-1] and used + gap + w > ctx.width:
            rows.append([])
            used = 0.0
        used += (gap if rows[-1] else 0) + w
        rows[-1].append(i)
    height = len(rows) * (box_h + gap)

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        border = to_color(el.border_color) or HexColor("#9ca3af")
        fill = to_color(el.color) or HexColor("#1a1a1a")
        for r, row in enumerate(rows):
            row_w = sum(widths[i] for i in row) + gap * (len(row) - 1)
            cx = align_x(x, width, row_w, el.alignment)
            y_top = top - r * (box_h + gap)
            for i in row:
                c.saveState()
                c.setLineWidth(0.5)
                c.setStrokeColor(border)
                c.roundRect(cx, y_top - box_h, widths[i], box_h, 1, stroke=1, fill=0)
                c.restoreState()
                c.setFont(font, el.font_size)
                c.setFillColor(fill)
                c.drawString(cx + 3, y_top - 1 - el.font_size * 0.8, codes[i])
                cx += widths[i] + gap

    return ElementBlock(el.id, el.type, height, draw, codes)


def ean13_check_digit(digits: str) -> str:
    """EAN-13 校验位"""
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(digits[:12]))
    return str((10 - total % 10) % 10)


def _barcode_drawing(fmt: str, value: str, height: float, max_width: float):
    """构建条码图形（EAN-13 不合法时回退 Code128）"""
    if fmt == "ean13":
        valid = value.isdigit() and (
            len(value) == 12 or (len(value) == 13 and ean13_check_digit(value) == value[12])
        )
        if valid:
            value = value[:12]
        else:
            logger.debug(f"EAN-13 值无效，回退 Code128: {value}")
            fmt = "code128"
    elif fmt == "code39":
        value = value.upper()

    name = BARCODE_NAMES[fmt]
    drawing = createBarcodeDrawing(name, value=value, barHeight=height, barWidth=0.75, humanReadable=False)
    if drawing.width > max_width > 0:
        drawing = createBarcodeDrawing(
            name,
            value=value,
            barHeight=height,
            barWidth=0.75 * max_width / drawing.width,
            humanReadable=False,
        )
    return drawing


def build_barcode(el: BarcodeElement, ctx: RenderContext) -> ElementBlock | None:
    value = ctx.data.identity.model_sku if el.auto_populate else el.value
    if not value:
        return None
    try:
        drawing = _barcode_drawing(el.format, value, el.height, ctx.width)
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"条码生成失败，跳过: {el.id}: {e}")
        return None

    text_font = resolve_font("Helvetica")
    text_h = 5 * LINE_HEIGHT + 1 if el.show_text else 0.0

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        start = align_x(x, width, drawing.width, el.alignment)
        renderPDF.draw(drawing, c, start, top - drawing.height)
        if el.show_text:
            draw_lines(
                c, [value], text_font, 5, "#1a1a1a", start, top - drawing.height - 1, drawing.width, "center",
            )

    return ElementBlock(el.id, el.type, drawing.height + text_h + 2, draw, [value] if el.show_text else [])


def build_icon_text(el: IconTextElement, ctx: RenderContext) -> ElementBlock | None:
    if not el.text:
        return None
    font = resolve_font(ctx.design.font_family)
    text_w = max(ctx.width - el.icon_size - 4, 1)
    lines = wrap_text(el.text, font, el.font_size, text_w)
    text_h = lines_height(lines, el.font_size)
    height = max(el.icon_size, text_h)

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        color = to_color(el.color) or HexColor("#374151")
        r = el.icon_size / 2
        cy = top - height / 2
        c.saveState()
        c.setFillColor(color)
        c.setFillAlpha(0.125)
        c.circle(x + r, cy, r, stroke=0, fill=1)
        c.restoreState()
        glyph = el.icon_size * 0.6
        c.setFont(resolve_font("Helvetica", bold=True), glyph)
        c.setFillColor(color)
        c.drawCentredString(x + r, cy - glyph * 0.35, "i")
        draw_lines(c, lines, font, el.font_size, el.color, x + el.icon_size + 4, top - (height - text_h) / 2, text_w)

    return ElementBlock(el.id, el.type, height + 2, draw, lines)


def build_package_counter(el: PackageCounterElement, ctx: RenderContext) -> ElementBlock | None:
    counter = ctx.data.counter
    if counter is None:
        return None

    text = format_package_counter(counter.current, counter.total, counter.format, counter.locale)
    if el.uppercase:
        text = text.upper()
    font = resolve_font(el.font_family or ctx.design.font_family, el.font_weight == "bold")
    pad_v = el.padding * 0.75
    box_w = max(60.0, text_width(text, font, el.font_size) + 2 * el.padding)
    box_h = el.font_size + 2 * pad_v

    def draw(c: Canvas, x: float, top: float, width: float) -> None:
        start = align_x(x, width, box_w, el.alignment)
        background = to_color(el.background_color) if el.show_background else None
        border = to_color(el.border_color) if el.show_border and el.border_width > 0 else None
        if background is not None or border is not None:
            c.saveState()
            if border is not None:
                c.setStrokeColor(border)
                c.setLineWidth(el.border_width)
            if background is not None:
                c.setFillColor(background)
            c.roundRect(
                start, top - box_h, box_w, box_h, el.border_radius,
                stroke=1 if border is not None else 0,
                fill=1 if background is not None else 0,
            )
            c.restoreState()
        draw_lines(c, [text], font, el.font_size, el.color, start, top - pad_v, box_w, "center", 1.0)

    return ElementBlock(el.id, el.type, box_h + 4, draw, [text])


BLOCK_BUILDERS: dict[str, Callable[[LabelElementBase, RenderContext], ElementBlock | None]] = {
    "text": build_text,
    "field-value": build_field_value,
    "qr-code": build_qr_code,
    "pictogram": build_pictogram,
    "compliance-badge": build_compliance_badge,
    "image": build_image,
    "divider": build_divider,
    "spacer": build_spacer,
    "material-code": build_material_code,
    "barcode": build_barcode,
    "icon-text": build_icon_text,
    "package-counter": build_package_counter,
}


def build_element_block(element: LabelElementBase, ctx: RenderContext) -> ElementBlock | None:
    """构建元素块（未知类型返回None）"""
    builder = BLOCK_BUILDERS.get(getattr(element, "type", ""))
    if builder is None:
        logger.debug(f"未知元素类型，跳过: {getattr(element, 'type', '?')}")
        return None
    return builder(element, ctx)
