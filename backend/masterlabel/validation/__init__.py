"""
校验层 - 数据/设计校验报告与合规检查清单
"""

from .compliance_checker import (
    ComplianceCheckItem,
    FixAction,
    calculate_compliance_score,
    run_compliance_checks,
)
from .validator import MIN_FONT_SIZE_PT, DesignValidator

__all__ = [
    "DesignValidator",
    "MIN_FONT_SIZE_PT",
    "ComplianceCheckItem",
    "FixAction",
    "run_compliance_checks",
    "calculate_compliance_score",
]
