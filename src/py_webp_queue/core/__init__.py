"""核心模块包。

尺寸计算、格式准备和 WebP 转换。
"""

from .formats import FormatProcessor, get_save_parameters
from .sizing import compute_target_size, fit_ratio, reduce_size
from .transform import convert, convert_sync, decode_image, encode_image


__all__ = [
    "FormatProcessor",
    "compute_target_size",
    "convert",
    "convert_sync",
    "decode_image",
    "encode_image",
    "fit_ratio",
    "get_save_parameters",
    "reduce_size",
]
