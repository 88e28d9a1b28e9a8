"""
导出流水线执行器 - 编排各阶段执行

职责：
1. 按顺序执行各阶段（二维码 → 组装 → 校验 → 渲染 → 打包）
2. 更新任务进度并持久化 job.json
3. 二维码失败降级为告警（空二维码继续组装）
4. 校验结果记入任务；仅在 block_on_errors 时阻断

测试要点：
- test_execute_full_pipeline: 完整流水线执行并产出 labels.zip
- test_qr_failure_flagged: 二维码失败记 qr_failed 并继续
- test_block_on_errors: 校验error阻断导出
- test_batch_failure_marks_job_failed: 批量导出失败时任务失败
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..assembly import LabelDataAssembler, QRCodeGenerator, attach_dpp_qr
from ..config import RuntimeConfig, get_config, load_rules
from ..doc_gen import DocumentRenderer, check_export_config
from ..interfaces import (
    BatchExportError,
    ExportError,
    IDesignValidator,
    IDocumentRenderer,
    ILabelDataAssembler,
    IQRCodeGenerator,
)
from ..models import ExportJob, PackageCounterElement, RenderedDocument
from ..validation import DesignValidator, calculate_compliance_score, run_compliance_checks
from .packager import Packager
from .stages import EXPORT_STAGES, ExportStageEnum, PipelineStage

logger = logging.getLogger(__name__)


class LabelExportExecutor:
    """导出流水线执行器"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        qr_generator: IQRCodeGenerator | None = None,
        assembler: ILabelDataAssembler | None = None,
        validator: IDesignValidator | None = None,
        renderer: IDocumentRenderer | None = None,
        packager: Packager | None = None,
    ):
        self.config = config or get_config()
        self.qr_generator = qr_generator or QRCodeGenerator(self.config.qr)
        self.rules = load_rules(self.config.rules_path)
        self.assembler = assembler or LabelDataAssembler(self.rules)
        self.validator = validator or DesignValidator(self.rules)
        self.renderer = renderer or DocumentRenderer(self.config.render, self.config.batch_export.delay_ms)
        self.packager = packager or Packager(self.rules)

    def execute(self, job: ExportJob) -> None:
        """执行流水线"""
        job.mark_running()
        job.progress.message = "任务开始"

        try:
            if job.work_dir is None:
                job.work_dir = self.config.get_job_dir(job.job_id)
            job.work_dir.mkdir(parents=True, exist_ok=True)
            self._persist_job(job)

            context: dict[str, Any] = {"params": job.request.params}
            for stage in EXPORT_STAGES:
                self._execute_stage(job, stage, context)

            job.mark_succeeded()
            job.progress.message = "任务完成"
            self._persist_job(job)

        except Exception as e:
            logger.exception(f"导出流水线执行失败: {job.job_id}")
            job.mark_failed(str(e))
            job.progress.message = f"任务失败: {e}"
            self._persist_job(job)
            raise

    def _execute_stage(self, job: ExportJob, stage: PipelineStage, context: dict[str, Any]) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        logger.info(f"[{job.job_id}] 开始阶段: {stage.name}")

        try:
            if stage.name == ExportStageEnum.GENERATE_QR.value:
                self._stage_generate_qr(job, context)

            elif stage.name == ExportStageEnum.ASSEMBLE.value:
                self._stage_assemble(job, context)

            elif stage.name == ExportStageEnum.VALIDATE.value:
                self._stage_validate(job, context)

            elif stage.name == ExportStageEnum.RENDER.value:
                self._stage_render(job, context)

            elif stage.name == ExportStageEnum.PACKAGE.value:
                self._stage_package(job, context)

            stage.execute(job)

        except Exception as e:
            logger.error(f"[{job.job_id}] 阶段失败 {stage.name}: {e}")
            job.add_flag(f"stage_failed:{stage.name}")
            raise

        job.progress.percent = stage.progress_end
        job.progress.message = f"完成阶段: {stage.name}"
        self._persist_job(job)

    def _stage_generate_qr(self, job: ExportJob, context: dict[str, Any]) -> None:
        """生成DPP链接与二维码（失败降级为空二维码）"""
        params, qr_failed = attach_dpp_qr(
            context["params"],
            job.request.serial_number,
            qr_generator=self.qr_generator,
            qr_settings=self.config.qr,
        )
        if qr_failed:
            job.add_flag("qr_failed")
        context["params"] = params

    def _stage_assemble(self, job: ExportJob, context: dict[str, Any]) -> None:
        """组装标签数据快照"""
        context["data"] = self.assembler.assemble(context["params"])

    def _stage_validate(self, job: ExportJob, context: dict[str, Any]) -> None:
        """校验数据与设计、合规清单评分、导出配置检查"""
        data = context["data"]
        design = job.request.design

        results = [*self.validator.validate_data(data), *self.validator.validate_design(design)]
        job.validation = [r.model_dump() for r in results]
        errors = [r for r in results if r.severity == "error"]
        for r in errors:
            job.add_flag(f"validation_error:{r.field}")

        checks = run_compliance_checks(design, data, data.product_group, data.variant, self.rules)
        job.compliance_score = calculate_compliance_score(checks)

        export_config = job.request.export_config
        if export_config is not None:
            has_counter = any(isinstance(el, PackageCounterElement) for el in design.elements)
            config_errors, config_warnings = check_export_config(
                export_config,
                has_counter,
                max_label_count=self.config.batch_export.max_label_count,
                many_files_warning=self.config.batch_export.many_files_warning,
            )
            for key in config_warnings:
                job.add_flag(key)
            if config_errors:
                raise ExportError(f"导出配置无效: {', '.join(config_errors)}")

        if errors and job.request.block_on_errors:
            raise ExportError(f"校验未通过（{len(errors)}个错误）: {', '.join(r.field for r in errors)}")

    def _stage_render(self, job: ExportJob, context: dict[str, Any]) -> None:
        """渲染并逐份落盘"""
        output_dir = job.work_dir / "output"
        output_dir.mkdir(parents=True, exist_ok=True)
        job.artifacts.output_dir = output_dir

        def write(document: RenderedDocument) -> None:
            path = output_dir / document.filename
            path.write_bytes(document.content)
            job.artifacts.documents.append(path)

        try:
            documents = self.renderer.render(
                job.request.design,
                context["data"],
                job.request.export_config,
                sink=write,
            )
        except BatchExportError as e:
            # 已落盘的文档保留在 artifacts.documents 中
            job.add_flag(f"batch_failed_at:{e.failed_index}")
            raise
        context["documents"] = documents
        logger.info(f"[{job.job_id}] 已生成{len(documents)}个文档")

    def _stage_package(self, job: ExportJob, context: dict[str, Any]) -> None:
        """生成manifest并打包"""
        job.artifacts.package_zip = job.work_dir / Packager.ZIP_NAME
        job.artifacts.manifest = self.packager.generate_manifest(job)
        self.packager.package(job)

    def _persist_job(self, job: ExportJob) -> None:
        if job.work_dir is None:
            return
        job_file = Path(job.work_dir) / "job.json"
        with open(job_file, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)
