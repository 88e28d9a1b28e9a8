"""
配置层 - 加载规则表与运行期配置

职责：
- 加载包内 label_rules.yaml（类别/认证/合规模块/包装代码规则表）
- 加载 documents/label_runtime.yaml（运行期参数）
- 读写持久化的标签设计
"""

from .design_loader import load_design, save_design
from .logging_setup import configure_logging
from .rules_loader import RuleLoader, RuleSpec, load_rules
from .runtime_config import (
    BatchExportConfig,
    LoggingConfig,
    OutputConfig,
    QRConfig,
    RenderConfig,
    RuntimeConfig,
    get_config,
    reload_config,
)

__all__ = [
    "RuleLoader",
    "RuleSpec",
    "load_rules",
    "RuntimeConfig",
    "RenderConfig",
    "BatchExportConfig",
    "QRConfig",
    "OutputConfig",
    "LoggingConfig",
    "get_config",
    "reload_config",
    "configure_logging",
    "load_design",
    "save_design",
]
