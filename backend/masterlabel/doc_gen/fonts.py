"""
字体解析 - (字族, 粗体, 斜体) → PDF标准14字体名

每个支持的字族有4个变体；不支持的字族回退到 Helvetica。
宽度量取自 reportlab 内置字体度量表（不做字形整形）。
"""

from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

# (regular, bold, italic, bold_italic)
FONT_VARIANTS: dict[str, tuple[str, str, str, str]] = {
    "Helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "Courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
    "Times-Roman": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
}

DEFAULT_FAMILY = "Helvetica"


def resolve_font(family: str | None, bold: bool = False, italic: bool = False) -> str:
    """解析字体名"""
    variants = FONT_VARIANTS.get(family or DEFAULT_FAMILY, FONT_VARIANTS[DEFAULT_FAMILY])
    return variants[(1 if bold else 0) + (2 if italic else 0)]


def text_width(text: str, font_name: str, font_size: float) -> float:
    """文本宽度（pt）"""
    return stringWidth(text, font_name, font_size)


def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> list[str]:
    """按宽度折行（按空格断词，超长单词按字符截断）"""
    if not text:
        return []

    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font_name, font_size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            # 单词本身超宽
            while text_width(word, font_name, font_size) > max_width and len(word) > 1:
                cut = len(word)
                while cut > 1 and text_width(word[:cut], font_name, font_size) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def truncate_text(text: str, font_name: str, font_size: float, max_width: float, suffix: str = "...") -> str:
    """截断为单行（超宽时末尾加省略号）"""
    if text_width(text, font_name, font_size) <= max_width:
        return text
    cut = len(text)
    while cut > 0 and text_width(text[:cut].rstrip() + suffix, font_name, font_size) > max_width:
        cut -= 1
    return text[:cut].rstrip() + suffix if cut else ""
