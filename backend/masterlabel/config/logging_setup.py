"""
日志初始化 - 按 LoggingConfig 配置根日志器

各模块统一使用 logging.getLogger(__name__)，此处只负责入口处一次性配置。
"""

from __future__ import annotations

import logging
from pathlib import Path

from .runtime_config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: LoggingConfig, log_dir: Path | None = None) -> None:
    """配置根日志器（重复调用会替换已有处理器）"""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_to_file:
        target_dir = log_dir or Path(".")
        target_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(target_dir / config.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
