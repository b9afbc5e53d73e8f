"""转换相关常量定义。

输出编码器固定为 WebP，这里集中维护编码器信息和预设的取值范围。
"""

import math
from typing import Final

from PIL import Image


class TargetCodec:
    """目标编码器信息（单一有损格式）"""

    FORMAT: Final[str] = "WEBP"
    EXTENSION: Final[str] = ".webp"

    # WebP 原生支持的色彩模式，其余模式需要先转换
    NATIVE_MODES: Final[set[str]] = {"RGB", "RGBA"}

    @classmethod
    def is_available(cls) -> bool:
        """检查当前 Pillow 是否能编码 WebP"""
        Image.init()
        return cls.FORMAT in Image.SAVE


class QualityDefaults:
    """质量相关默认值"""

    DEFAULT: Final[int] = 85
    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100


class PresetLimits:
    """预设字段的取值范围"""

    DEFAULT_REDUCE_PERCENT: Final[int] = 0
    MIN_REDUCE_PERCENT: Final[int] = 0
    MAX_REDUCE_PERCENT: Final[int] = 95

    # 尺寸最小为 1 像素
    MIN_DIMENSION: Final[int] = 1


class QueueDefaults:
    """队列相关默认值"""

    # 无路径来源的默认文件名
    UNNAMED_SOURCE: Final[str] = "image"


def round_half_up(value: float) -> int:
    """四舍五入（.5 向上取整）

    Python 内置 round 为银行家舍入，尺寸和节省百分比统一使用这里的规则。
    """
    return math.floor(value + 0.5)


def clamp(value: int, minimum: int, maximum: int) -> int:
    """将数值限制在 [minimum, maximum] 之间"""
    return min(maximum, max(minimum, value))
