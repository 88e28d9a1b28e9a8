"""
打包器 - 生成交付包和manifest

职责：
1. 打包 output 目录下的PDF为 labels.zip
2. 生成 manifest.json（输入摘要、校验结果、产物清单）

测试要点：
- test_package_zip: ZIP包含全部PDF与manifest
- test_manifest_structure: manifest结构
"""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import RuleSpec, load_rules
from ..interfaces import ExportError, IPackager

if TYPE_CHECKING:
    from ..models import ExportJob


class Packager(IPackager):
    """打包器实现"""

    ZIP_NAME = "labels.zip"
    MANIFEST_NAME = "manifest.json"

    def __init__(self, rules: RuleSpec | None = None):
        self.rules = rules or load_rules()

    def package(self, job: ExportJob) -> Path:
        """打包交付产物"""
        if not job.work_dir:
            raise ExportError("任务工作目录未设置")

        output_dir = job.work_dir / "output"
        zip_path = job.work_dir / self.ZIP_NAME

        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            if output_dir.exists():
                for file in sorted(output_dir.rglob("*.pdf")):
                    zf.write(file, f"labels/{file.relative_to(output_dir)}")

            manifest_path = job.work_dir / self.MANIFEST_NAME
            if manifest_path.exists():
                zf.write(manifest_path, self.MANIFEST_NAME)

        job.artifacts.package_zip = zip_path
        return zip_path

    def generate_manifest(self, job: ExportJob) -> Path:
        """生成manifest.json"""
        if not job.work_dir:
            raise ExportError("任务工作目录未设置")

        request = job.request
        product = request.params.product
        batch = request.params.batch
        export_config = request.export_config

        manifest = {
            "schema_version": "1.0",
            "job_id": job.job_id,
            "rules_version": f"label_rules.yaml@{self.rules.schema_version}",

            "inputs": {
                "product": product.name,
                "gtin": product.gtin,
                "category": product.category,
                "batch_number": (batch.batch_number if batch else None) or product.batch_number,
                "variant": request.params.variant.value,
                "export_config": export_config.model_dump(mode="json") if export_config else None,
            },

            "validation": job.validation,
            "compliance_score": job.compliance_score,

            "artifacts": {
                "package_zip": job.artifacts.package_zip.name if job.artifacts.package_zip else None,
                "documents": [p.name for p in job.artifacts.documents],
            },

            "flags": job.flags,
            "errors": job.errors,

            "timestamps": {
                "created_at": job.created_at.isoformat() if job.created_at else None,
                "started_at": job.started_at.isoformat() if job.started_at else None,
                "finished_at": job.finished_at.isoformat() if job.finished_at else None,
            },
        }

        manifest_path = job.work_dir / self.MANIFEST_NAME
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, ensure_ascii=False, indent=2)

        return manifest_path
