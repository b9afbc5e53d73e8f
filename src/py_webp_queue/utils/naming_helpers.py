"""文件命名工具模块。

提供导出文件名的生成和路径去重功能。
"""

import itertools
from pathlib import Path, PurePath

from ..models.constants import QueueDefaults, TargetCodec


def derive_output_name(source_name: str, extension: str = TargetCodec.EXTENSION) -> str:
    """生成导出文件名：<原文件名去扩展名>.<目标扩展名>

    Args:
        source_name: 源文件名（可包含目录）
        extension: 目标扩展名

    Returns:
        str: 导出文件名（不含路径）
    """
    base_name = PurePath(source_name).stem if source_name else ""
    return f"{base_name or QueueDefaults.UNNAMED_SOURCE}{extension}"


def ensure_unique_path(path: Path, reserved: set[Path] | None = None) -> Path:
    """确保路径唯一，如果文件已存在则添加数字后缀

    Args:
        path: 原始路径
        reserved: 本次已分配但尚未写入的路径

    Returns:
        Path: 唯一的路径
    """
    reserved = reserved or set()
    if not path.exists() and path not in reserved:
        return path

    base = path.stem
    suffix = path.suffix
    parent = path.parent

    for counter in itertools.count(1):
        new_path = parent / f"{base}_{counter}{suffix}"
        if not new_path.exists() and new_path not in reserved:
            return new_path

    return path  # pragma: no cover
