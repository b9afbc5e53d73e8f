"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler

from ..config import get_config


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def setup_logging() -> None:
    """按全局配置初始化根日志记录器（重复调用安全）"""
    settings = get_config().logging
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    logging.basicConfig(level=level, format=settings.LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    if settings.ENABLE_FILE_LOGGING and not any(
        isinstance(h, RotatingFileHandler) for h in root.handlers
    ):
        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        root.addHandler(file_handler)
