"""
流水线模块 - 导出任务编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器
- job_manager: 任务管理
- packager: 打包与manifest生成
"""

from .executor import LabelExportExecutor
from .job_manager import JobManager
from .packager import Packager
from .stages import EXPORT_STAGES, ExportStageEnum, PipelineStage

__all__ = [
    "PipelineStage",
    "ExportStageEnum",
    "EXPORT_STAGES",
    "LabelExportExecutor",
    "JobManager",
    "Packager",
]
