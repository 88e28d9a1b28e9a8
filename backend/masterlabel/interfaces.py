"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from masterlabel.interfaces import IQRCodeGenerator

    class MyQRGenerator(IQRCodeGenerator):
        def to_data_url(self, url: str) -> str:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import (
        AssembleParams,
        DesignValidationResult,
        ExportJob,
        LabelDesign,
        LabelValidationResult,
        MasterLabelData,
        MultiLabelExportConfig,
        RenderedDocument,
    )


# ============================================================================
# 数据组装接口
# ============================================================================

class IQRCodeGenerator(ABC):
    """二维码生成器接口 - DPP链接转图片"""

    @abstractmethod
    def to_data_url(self, url: str) -> str:
        """
        生成二维码图片并编码为 data URL

        Args:
            url: 待编码的DPP链接

        Returns:
            data:image/png;base64,... 字符串

        Raises:
            QRGenerationError: 生成失败
        """
        ...


class ILabelDataAssembler(ABC):
    """标签数据组装器接口 - 实体记录转标签快照"""

    @abstractmethod
    def assemble(self, params: AssembleParams) -> MasterLabelData:
        """
        组装标签数据快照

        流程：
        1. 产品类别归类（ProductGroup）
        2. 选择有效材料/认证/回收信息（批次覆盖优先）
        3. 构建合规模块、可持续性、身份信息
        4. 按变体（B2B/B2C）附加专属字段

        Args:
            params: 组装参数（产品、批次、供应商、QR等）

        Returns:
            不可变的 MasterLabelData
        """
        ...


# ============================================================================
# 校验与渲染接口
# ============================================================================

class IDesignValidator(ABC):
    """设计校验器接口 - 仅输出报告，不阻断渲染"""

    @abstractmethod
    def validate_data(self, data: MasterLabelData) -> list[LabelValidationResult]:
        """校验标签数据完整性"""
        ...

    @abstractmethod
    def validate_design(self, design: LabelDesign) -> list[DesignValidationResult]:
        """校验设计结构"""
        ...


class IDocumentRenderer(ABC):
    """文档渲染器接口"""

    @abstractmethod
    def render(
        self,
        design: LabelDesign,
        data: MasterLabelData,
        export_config: MultiLabelExportConfig | None = None,
        sink: IDocumentSink | None = None,
    ) -> list[RenderedDocument]:
        """
        渲染标签文档

        Args:
            design: 标签设计
            data: 标签数据快照
            export_config: 批量导出配置（None表示单份文档）
            sink: 逐份交付钩子（按顺序调用）

        Returns:
            渲染结果列表（单份模式仅1个）

        Raises:
            RenderError: 单份渲染失败
            BatchExportError: 批量导出中途失败
        """
        ...


class IDocumentSink(Protocol):
    """文档输出协议（批量导出的逐份落盘/下载钩子）"""

    def __call__(self, document: RenderedDocument) -> None:
        ...


# ============================================================================
# 流水线接口
# ============================================================================

class IPackager(ABC):
    """打包器接口"""

    @abstractmethod
    def package(self, job: ExportJob) -> Path:
        """
        打包交付产物

        Args:
            job: 导出任务

        Returns:
            labels.zip 路径
        """
        ...

    @abstractmethod
    def generate_manifest(self, job: ExportJob) -> Path:
        """
        生成manifest.json

        Args:
            job: 导出任务

        Returns:
            manifest.json 路径
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class MasterLabelError(Exception):
    """基础异常"""
    pass


class ConfigError(MasterLabelError):
    """配置错误"""
    pass


class DesignLoadError(MasterLabelError):
    """设计文件加载错误"""
    pass


class QRGenerationError(MasterLabelError):
    """二维码生成错误"""
    pass


class RenderError(MasterLabelError):
    """渲染错误"""
    pass


class ExportError(MasterLabelError):
    """导出错误"""
    pass


class BatchExportError(ExportError):
    """批量导出中途失败（携带已完成的文档）"""

    def __init__(
        self,
        message: str,
        failed_index: int,
        completed: list[RenderedDocument] | None = None,
    ):
        super().__init__(message)
        self.failed_index = failed_index
        self.completed = list(completed or [])
