"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image


_APP_DIR_NAME = "py-webp-queue"
_PRESET_FILE_NAME = "presets.json"


def _default_preset_path() -> Path:
    """平台相关的预设文件路径"""
    if os.name == "nt":
        if app_data := os.environ.get("APPDATA"):
            return Path(app_data) / _APP_DIR_NAME / _PRESET_FILE_NAME
        return Path.home() / f".{_APP_DIR_NAME}" / _PRESET_FILE_NAME

    if config_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(config_home) / _APP_DIR_NAME / _PRESET_FILE_NAME
    return Path.home() / ".config" / _APP_DIR_NAME / _PRESET_FILE_NAME


@dataclass(frozen=True)
class ConversionDefaults:
    """转换相关的默认配置"""

    # 质量设置
    QUALITY: int = 85
    REDUCE_PERCENT: int = 0

    # WebP 编码速度/压缩率权衡（0-6）
    WEBP_METHOD: int = 4

    # Pillow 解压炸弹阈值（像素数）
    MAX_IMAGE_PIXELS: int = 178_956_970


@dataclass(frozen=True)
class StorageDefaults:
    """预设持久化相关的默认配置"""

    PRESET_FILE: Path = field(default_factory=_default_preset_path)


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_webp_queue.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.conversion = ConversionDefaults()
        self.storage = StorageDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()
        self._apply_image_limits()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 转换配置
        if webp_method := os.getenv("PWQ_WEBP_METHOD"):
            object.__setattr__(self.conversion, "WEBP_METHOD", int(webp_method))

        if max_pixels := os.getenv("PWQ_MAX_IMAGE_PIXELS"):
            object.__setattr__(self.conversion, "MAX_IMAGE_PIXELS", int(max_pixels))

        # 存储配置
        if preset_file := os.getenv("PWQ_PRESET_FILE"):
            object.__setattr__(self.storage, "PRESET_FILE", Path(preset_file))

        # 日志配置
        if log_level := os.getenv("PWQ_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PWQ_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )

        if log_file := os.getenv("PWQ_LOG_FILE"):
            object.__setattr__(self.logging, "LOG_FILE_PATH", log_file)

    def _apply_image_limits(self):
        """设置 Pillow 解压炸弹阈值（进程全局，加载配置时设置一次）"""
        Image.MAX_IMAGE_PIXELS = self.conversion.MAX_IMAGE_PIXELS


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
