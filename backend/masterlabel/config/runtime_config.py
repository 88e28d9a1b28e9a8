"""
运行期配置 - 读取 documents/label_runtime.yaml

职责：
- 加载渲染/批量导出/二维码/输出路径等运行参数
- 提供环境变量覆盖机制（前缀 MASTERLABEL_）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from ..interfaces import ConfigError


class RenderConfig(BaseModel):
    """渲染配置"""

    default_locale: str = "en"
    section_gap: float = 4.0
    bordered_section_gap: float = 8.0


class BatchExportConfig(BaseModel):
    """批量导出配置"""

    delay_ms: int = 300
    max_label_count: int = 999
    many_files_warning: int = 50


class QRConfig(BaseModel):
    """二维码与DPP链接配置"""

    error_correction: str = "H"
    margin: int = 1
    width: int = 200
    base_url: str = "https://dpp.example.eu"
    resolver_format: str = "default"
    custom_base_url: str = ""


class OutputConfig(BaseModel):
    """输出配置"""

    output_dir: Path = Path("storage/labels")


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "masterlabel.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 基础路径
    base_dir: Path = Path(".")
    storage_dir: Path = Path("storage")
    rules_path: Path | None = None
    runtime_spec_path: Path = Path("documents/label_runtime.yaml")

    # 各子配置
    render: RenderConfig = Field(default_factory=RenderConfig)
    batch_export: BatchExportConfig = Field(default_factory=BatchExportConfig)
    qr: QRConfig = Field(default_factory=QRConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "MASTERLABEL_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"运行期配置解析失败: {path}: {e}") from e

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            **cls._extract(runtime_opts, "paths"),
            render=RenderConfig(**cls._extract(runtime_opts, "render")),
            batch_export=BatchExportConfig(**cls._extract(runtime_opts, "batch_export")),
            qr=QRConfig(**cls._extract(runtime_opts, "qr")),
            output=OutputConfig(**cls._extract(runtime_opts, "output")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.output.output_dir.is_absolute():
            self.output.output_dir = (base_dir / self.output.output_dir).resolve()
        if self.rules_path and not self.rules_path.is_absolute():
            self.rules_path = (base_dir / self.rules_path).resolve()

    def get_job_dir(self, job_id: str) -> Path:
        """获取任务工作目录"""
        return self.storage_dir / "jobs" / job_id

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        (self.storage_dir / "jobs").mkdir(exist_ok=True)


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        default_path = Path("documents/label_runtime.yaml")
        if not default_path.exists():
            fallback_path = Path("config/label_runtime.yaml")
            if fallback_path.exists():
                default_path = fallback_path
        _config = RuntimeConfig.from_yaml(default_path)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or "documents/label_runtime.yaml"
    _config = RuntimeConfig.from_yaml(path)
    return _config
