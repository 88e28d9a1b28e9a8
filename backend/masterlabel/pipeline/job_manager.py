"""
任务管理器 - 导出任务创建/查询/更新

职责：
1. 创建任务并分配ID
2. 任务状态持久化（job.json）
3. 任务查询

测试要点：
- test_create_job: 创建任务并落盘
- test_get_job_from_disk: 缓存未命中时从磁盘加载
- test_list_jobs_by_status: 按状态过滤
"""

from __future__ import annotations

import json
import logging
import uuid

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..models import ExportJob, ExportRequest, JobStatus

logger = logging.getLogger(__name__)


class JobManager:
    """任务管理器实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self._jobs: dict[str, ExportJob] = {}  # 内存缓存

    def create_job(self, request: ExportRequest) -> ExportJob:
        """创建任务"""
        job_id = str(uuid.uuid4())
        job = ExportJob(
            job_id=job_id,
            request=request,
            work_dir=self.config.get_job_dir(job_id),
        )
        self._jobs[job_id] = job
        self._persist_job(job)
        return job

    def get_job(self, job_id: str) -> ExportJob | None:
        """获取任务"""
        if job_id in self._jobs:
            return self._jobs[job_id]

        job = self._load_job(job_id)
        if job:
            self._jobs[job_id] = job
        return job

    def update_job(self, job: ExportJob) -> None:
        """更新任务状态"""
        self._jobs[job.job_id] = job
        self._persist_job(job)

    def list_jobs(self, status: JobStatus | None = None, limit: int = 100) -> list[ExportJob]:
        """列出任务（按创建时间降序）"""
        jobs = list(self._jobs.values())
        if status:
            jobs = [j for j in jobs if j.status == status]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return jobs[:limit]

    def _persist_job(self, job: ExportJob) -> None:
        job_dir = self.config.get_job_dir(job.job_id)
        job_dir.mkdir(parents=True, exist_ok=True)
        with open(job_dir / "job.json", "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)

    def _load_job(self, job_id: str) -> ExportJob | None:
        job_file = self.config.get_job_dir(job_id) / "job.json"
        if not job_file.exists():
            return None
        try:
            with open(job_file, "r", encoding="utf-8") as f:
                return ExportJob.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"任务文件无法加载: {job_file}: {e}")
            return None
