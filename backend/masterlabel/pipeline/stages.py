"""
导出流水线阶段定义

职责：
1. 定义各阶段的名称和进度区间
2. 提供阶段执行钩子

测试要点：
- test_stage_order: 阶段顺序固定
- test_stage_progress_ranges: 进度区间连续覆盖0-100
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..models import ExportJob


class ExportStageEnum(str, Enum):
    """导出流水线阶段枚举"""
    GENERATE_QR = "GENERATE_QR"
    ASSEMBLE = "ASSEMBLE"
    VALIDATE = "VALIDATE"
    RENDER = "RENDER"
    PACKAGE = "PACKAGE"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点
    handler: Callable[[ExportJob], None] | None = None

    def execute(self, job: ExportJob) -> None:
        """执行阶段"""
        if self.handler:
            self.handler(job)


# 标签导出流水线各阶段配置
EXPORT_STAGES: list[PipelineStage] = [
    PipelineStage(ExportStageEnum.GENERATE_QR.value, 0, 10),
    PipelineStage(ExportStageEnum.ASSEMBLE.value, 10, 25),
    PipelineStage(ExportStageEnum.VALIDATE.value, 25, 35),
    PipelineStage(ExportStageEnum.RENDER.value, 35, 90),
    PipelineStage(ExportStageEnum.PACKAGE.value, 90, 100),
]
