"""
导出任务模型 - 定义任务状态与生命周期

一个导出任务 = 一次（产品, 批次, 设计）到 PDF 交付包的完整流程
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .design import LabelDesign, MultiLabelExportConfig
from .records import AssembleParams


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobArtifacts(BaseModel):
    """任务产物路径"""
    package_zip: Path | None = None
    output_dir: Path | None = None
    documents: list[Path] = Field(default_factory=list)
    manifest: Path | None = None


class JobProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    message: str = ""


class ExportRequest(BaseModel):
    """导出请求"""
    params: AssembleParams
    design: LabelDesign
    export_config: MultiLabelExportConfig | None = None
    serial_number: str = ""
    block_on_errors: bool = False


class ExportJob(BaseModel):
    """导出任务实体"""
    job_id: str = Field(..., description="UUID")
    request: ExportRequest

    # 状态
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)

    # 产物
    artifacts: JobArtifacts = Field(default_factory=JobArtifacts)

    # 结果
    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")
    validation: list[dict] = Field(default_factory=list, description="校验报告")
    compliance_score: int | None = None

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    # 工作目录（运行时设置）
    work_dir: Path | None = None

    model_config = {"arbitrary_types_allowed": True}

    def mark_running(self, stage: str = "GENERATE_QR") -> None:
        """标记为运行中"""
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
