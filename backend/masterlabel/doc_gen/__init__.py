"""
文档生成层 - 标签设计渲染为PDF

流程：元素块构建 → 分页 → PDF绘制 → （批量）逐份导出
"""

from .batch_export import BatchExporter, check_export_config, copy_filename, range_filename, single_filename
from .counter import format_package_counter
from .defaults import (
    create_blank_design,
    create_default_sections,
    create_element,
    get_default_design_for_group,
    load_builtin_templates,
)
from .field_resolver import resolve_field_value
from .pagination import PageLayout, SectionSlice, paginate
from .pdf_engine import PDFPainter, count_pdf_pages
from .pictograms import builtin_pictogram_categories, get_builtin_pictogram, get_builtin_pictograms_by_category
from .renderer import DocumentRenderer

__all__ = [
    "DocumentRenderer",
    "BatchExporter",
    "check_export_config",
    "single_filename",
    "copy_filename",
    "range_filename",
    "format_package_counter",
    "resolve_field_value",
    "PageLayout",
    "SectionSlice",
    "paginate",
    "PDFPainter",
    "count_pdf_pages",
    "get_builtin_pictogram",
    "get_builtin_pictograms_by_category",
    "builtin_pictogram_categories",
    "create_blank_design",
    "create_default_sections",
    "create_element",
    "get_default_design_for_group",
    "load_builtin_templates",
]
