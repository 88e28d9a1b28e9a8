"""
批量导出 - 按计数生成多份标签

职责：
1. 为每份副本派生带计数上下文的数据快照（不修改基础快照）
2. 逐份文档模式（batch）：每份一个PDF，份与份之间按配置延时
3. 单文档模式（single）：所有副本按顺序写入一个多页PDF
4. 导出前的配置提示（check_export_config）

约定：
- 份序号 current = start_number + i，total = start_number + label_count - 1
- 份严格按序号递增顺序产出与交付
- 交付（sink）失败时停止，抛出 BatchExportError（携带失败序号与已完成文档）

测试要点：
- test_counter_sequence: labelCount=3, startNumber=5 → (5,7),(6,7),(7,7)
- test_batch_filenames_zero_padded: 文件名序号补零
- test_sink_failure_stops_batch: 中途失败携带已完成文档
- test_no_delay_when_zero: delay_ms=0 时不调用sleep
"""

from __future__ import annotations

import logging
import re
import time
from datetime import date
from typing import TYPE_CHECKING, Callable

from ..interfaces import BatchExportError, IDocumentSink, RenderError
from ..models import LabelDesign, MasterLabelData, MultiLabelExportConfig, RenderedDocument
from .counter import DEFAULT_LOCALE

if TYPE_CHECKING:
    from .renderer import DocumentRenderer

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "master-label"
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


def _slug(value: str, fallback: str) -> str:
    cleaned = _UNSAFE_RE.sub("_", value or "").strip("_")
    return cleaned or fallback


def _stem(data: MasterLabelData) -> str:
    sku = _slug(data.identity.model_sku, "product")
    batch = _slug(data.identity.batch_number, "batch")
    return f"{FILENAME_PREFIX}-{sku}-{batch}"


def single_filename(data: MasterLabelData, on: date | None = None) -> str:
    """单份标签文件名"""
    return f"{_stem(data)}-{(on or date.today()).isoformat()}.pdf"


def copy_filename(data: MasterLabelData, current: int, total: int) -> str:
    """逐份文档模式的文件名（序号补零到3位）"""
    return f"{_stem(data)}-{current:03d}-of-{total:03d}.pdf"


def range_filename(data: MasterLabelData, start: int, end: int) -> str:
    """单文档多页模式的文件名"""
    return f"{_stem(data)}-{start}-to-{end}.pdf"


def iter_counter_copies(
    data: MasterLabelData,
    config: MultiLabelExportConfig,
    default_locale: str = DEFAULT_LOCALE,
) -> list[MasterLabelData]:
    """派生全部计数副本（按序号递增）"""
    total = config.end_number
    locale = config.locale or default_locale
    return [
        data.with_counter(config.start_number + i, total, config.format, locale)
        for i in range(config.label_count)
    ]


def check_export_config(
    config: MultiLabelExportConfig,
    has_counter_element: bool,
    max_label_count: int = 999,
    many_files_warning: int = 50,
) -> tuple[list[str], list[str]]:
    """
    导出配置提示

    Returns:
        (errors, warnings) i18n键列表；errors 非空时不应导出
    """
    errors: list[str] = []
    warnings: list[str] = []
    if config.label_count < 1:
        errors.append("ml.export.validation.minCount")
    if config.label_count > max_label_count:
        errors.append("ml.export.validation.maxCount")
    if config.start_number < 1:
        errors.append("ml.export.validation.minStart")
    if config.label_count > 1 and not has_counter_element:
        warnings.append("ml.export.validation.noCounterElement")
    if config.label_count > many_files_warning and config.filename_pattern == "batch":
        warnings.append("ml.export.validation.manyFiles")
    return errors, warnings


class BatchExporter:
    """批量导出器"""

    def __init__(
        self,
        renderer: DocumentRenderer,
        delay_ms: int = 300,
        sleep: Callable[[float], None] = time.sleep,
        default_locale: str = DEFAULT_LOCALE,
    ):
        self.renderer = renderer
        self.delay_ms = delay_ms
        self.sleep = sleep
        self.default_locale = default_locale

    def export(
        self,
        design: LabelDesign,
        data: MasterLabelData,
        config: MultiLabelExportConfig,
        sink: IDocumentSink | None = None,
    ) -> list[RenderedDocument]:
        """按配置导出"""
        copies = iter_counter_copies(data, config, self.default_locale)
        logger.info(
            f"批量导出: {config.label_count}份 "
            f"({config.start_number}-{config.end_number}), 模式={config.filename_pattern}"
        )
        if config.filename_pattern == "single":
            return self._export_single(design, data, config, copies, sink)
        return self._export_each(design, data, config, copies, sink)

    def _export_single(
        self,
        design: LabelDesign,
        data: MasterLabelData,
        config: MultiLabelExportConfig,
        copies: list[MasterLabelData],
        sink: IDocumentSink | None,
    ) -> list[RenderedDocument]:
        filename = range_filename(data, config.start_number, config.end_number)
        document = self.renderer.render_document(design, copies, filename)
        if sink is not None:
            try:
                sink(document)
            except (OSError, RenderError) as e:
                logger.error(f"文档交付失败: {filename}: {e}")
                raise BatchExportError(
                    f"文档交付失败: {filename}: {e}",
                    failed_index=config.start_number,
                ) from e
        return [document]

    def _export_each(
        self,
        design: LabelDesign,
        data: MasterLabelData,
        config: MultiLabelExportConfig,
        copies: list[MasterLabelData],
        sink: IDocumentSink | None,
    ) -> list[RenderedDocument]:
        completed: list[RenderedDocument] = []
        total = config.end_number

        for i, copy in enumerate(copies):
            current = copy.counter.current
            if i > 0 and self.delay_ms > 0:
                self.sleep(self.delay_ms / 1000)

            filename = copy_filename(data, current, total)
            try:
                document = self.renderer.render_document(design, [copy], filename)
                document = document.model_copy(update={"copy_index": current})
                if sink is not None:
                    sink(document)
            except (OSError, RenderError) as e:
                logger.error(f"批量导出在第{current}份失败（已完成{len(completed)}份）: {e}")
                raise BatchExportError(
                    f"批量导出在第{current}份失败: {e}",
                    failed_index=current,
                    completed=completed,
                ) from e
            completed.append(document)
            logger.debug(f"已导出: {filename}")

        return completed
