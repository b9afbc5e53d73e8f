"""图片转换引擎模块。

解码 → 缩小 → 适配上限 → WebP 编码，生成 ConvertedOutput。
同步实现在工作线程中执行，异步入口是引擎唯一的挂起点。
"""

import asyncio
from io import BytesIO

from PIL import Image, ImageOps

from ..exceptions import DecodeError, EncodeError, handle_image_errors
from ..models.constants import TargetCodec
from ..models.preset import Preset
from ..models.queue_item import ConvertedOutput
from ..utils.logging_helpers import get_logger
from .formats import FormatProcessor, get_save_parameters
from .sizing import compute_target_size


logger = get_logger()


@handle_image_errors("decode")
def decode_image(source: bytes) -> Image.Image:
    """解码源图片并应用 EXIF 方向

    Raises:
        DecodeError: 数据为空、损坏或格式不支持
    """
    if not source:
        raise DecodeError("源图片数据为空")

    img = Image.open(BytesIO(source))
    img.load()
    return ImageOps.exif_transpose(img)


@handle_image_errors("encode")
def encode_image(img: Image.Image, preset: Preset) -> bytes:
    """按预设质量编码为 WebP

    Raises:
        EncodeError: 编码器拒绝参数或没有产生输出
    """
    buffer = BytesIO()
    img.save(buffer, **get_save_parameters(preset))
    blob = buffer.getvalue()
    if not blob:
        raise EncodeError("编码器没有产生输出")
    return blob


def resize_image(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """调整图片尺寸（尺寸不变时原样返回）"""
    if img.size == size:
        return img
    return img.resize(size, Image.Resampling.LANCZOS)


def convert_sync(
    source: bytes,
    preset: Preset,
    format_processor: FormatProcessor | None = None,
) -> ConvertedOutput:
    """同步执行一次转换。

    Args:
        source: 源图片数据
        preset: 转换预设

    Returns:
        ConvertedOutput: 转换结果

    Raises:
        DecodeError: 源图片无法解码
        EncodeError: 编码失败
    """
    format_processor = format_processor or FormatProcessor()

    img = decode_image(source)
    original_dimensions = img.size
    target_size = compute_target_size(img.width, img.height, preset)

    processed = format_processor.prepare_for_webp(resize_image(img, target_size))
    blob = encode_image(processed, preset)

    logger.debug(
        f"转换完成: {original_dimensions} → {target_size}, "
        f"{len(source)} → {len(blob)} bytes"
    )

    return ConvertedOutput(
        original_size=len(source),
        converted_size=len(blob),
        blob=blob,
        preset=preset,
        format_used=TargetCodec.FORMAT,
        original_dimensions=original_dimensions,
        final_dimensions=target_size,
    )


async def convert(source: bytes, preset: Preset) -> ConvertedOutput:
    """异步转换入口，在工作线程中执行解码和编码"""
    return await asyncio.to_thread(convert_sync, source, preset)
