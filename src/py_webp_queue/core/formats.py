"""格式处理器模块。

为 WebP 编码准备图片色彩模式并生成保存参数。
"""

import logging
from typing import Any

from PIL import Image

from ..config import get_config
from ..models.constants import TargetCodec
from ..models.preset import Preset


logger = logging.getLogger(__name__)


class FormatProcessor:
    """WebP 格式处理器"""

    def prepare_for_webp(self, img: Image.Image) -> Image.Image:
        """为 WebP 格式准备图片

        WebP 只支持 RGB/RGBA，透明信息转为 RGBA 保留，其余模式转为 RGB。

        Args:
            img: PIL图片对象

        Returns:
            Image.Image: 处理后的图片对象
        """
        if img.mode in TargetCodec.NATIVE_MODES:
            return img

        match img.mode:
            case "P" | "PA" if "transparency" in img.info or img.mode == "PA":
                return img.convert("RGBA")
            case "LA" | "La" | "RGBa":
                return img.convert("RGBA")
            case "I;16" | "I;16B" | "I;16L":
                # 高位深灰度先映射到 8 位
                logger.debug(f"高位深模式 {img.mode} 转换为 RGB")
                return img.convert("I").point(lambda v: v / 256).convert("RGB")
            case _:
                return img.convert("RGB")


def get_save_parameters(preset: Preset) -> dict[str, Any]:
    """获取 WebP 保存参数

    Pillow 的 quality 取值为 1-100，对应编码器质量 preset.quality / 100。
    """
    return {
        "format": TargetCodec.FORMAT,
        "quality": preset.quality,
        "method": get_config().conversion.WEBP_METHOD,
        "lossless": False,
    }
