"""输出尺寸计算模块。

先按百分比缩小，再按尺寸上限等比适配；上限永远不会放大图片。
"""

from ..models.constants import PresetLimits, round_half_up
from ..models.preset import Preset


def reduce_size(width: int, height: int, reduce_percent: int) -> tuple[int, int]:
    """按百分比缩小，每边至少 1 像素"""
    if reduce_percent <= 0:
        return width, height

    ratio = (100 - reduce_percent) / 100
    return (
        max(PresetLimits.MIN_DIMENSION, round_half_up(width * ratio)),
        max(PresetLimits.MIN_DIMENSION, round_half_up(height * ratio)),
    )


def fit_ratio(
    width: int, height: int, max_width: int | None, max_height: int | None
) -> float:
    """计算适配比例：使受限边恰好贴合上限

    未设置的上限视为无穷大，结果可能大于 1（调用方负责不放大）。
    """
    width_ratio = max_width / width if max_width else float("inf")
    height_ratio = max_height / height if max_height else float("inf")
    return min(width_ratio, height_ratio)


def compute_target_size(width: int, height: int, preset: Preset) -> tuple[int, int]:
    """计算预设作用于源尺寸后的输出尺寸

    Args:
        width: 源宽度
        height: 源高度
        preset: 转换预设

    Returns:
        tuple[int, int]: 输出宽度和高度
    """
    width, height = reduce_size(width, height, preset.reduce_percent)

    if preset.has_size_cap:
        ratio = fit_ratio(width, height, preset.max_width, preset.max_height)
        if ratio < 1:
            width = max(PresetLimits.MIN_DIMENSION, round_half_up(width * ratio))
            height = max(PresetLimits.MIN_DIMENSION, round_half_up(height * ratio))

    return width, height
