"""批量 WebP 转换队列库。

基于预设的批量图片转换：顺序调度、单编码器、实时节省统计。
"""

__version__ = "0.1.0"
__description__ = "基于预设的批量 WebP 转换队列"

# 核心功能导出
from .converter import QueueConverter
from .exceptions import ConversionError, DecodeError, EncodeError
from .models import ConvertedOutput, Preset, QueuedItem, QueueStatus, QueueSummary


__all__ = [
    "ConversionError",
    "ConvertedOutput",
    "DecodeError",
    "EncodeError",
    "Preset",
    "QueueConverter",
    "QueueStatus",
    "QueueSummary",
    "QueuedItem",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
