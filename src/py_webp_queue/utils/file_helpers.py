"""工具函数模块。

提供图片文件识别与查找的实用工具函数。
"""

import mimetypes
from collections.abc import Iterator
from pathlib import Path

from PIL import Image

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def is_image_like(file_path: str | Path) -> bool:
    """宽松的图片类型检查（只看扩展名/MIME 类型，不检查内容）

    Args:
        file_path: 文件路径

    Returns:
        bool: MIME 类型以 image/ 开头或扩展名已在 Pillow 注册时为 True
    """
    path = Path(file_path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type and mime_type.startswith("image/"):
        return True
    return path.suffix.lower() in Image.registered_extensions()


def find_image_files(
    directory: str | Path,
    recursive: bool = True,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件（按路径排序）。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.is_dir():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return

    # 选择搜索模式
    pattern = "**/*" if recursive else "*"

    try:
        for file_path in sorted(directory.glob(pattern)):
            if (
                file_path.is_file()
                and is_image_like(file_path)
                and not any(
                    exclude_dir in file_path.parts for exclude_dir in exclude_dirs
                )
            ):
                yield file_path
    except PermissionError:
        logger.error(MessageFormatter.permission_error(directory, "访问目录"))


def expand_image_paths(
    paths: list[str | Path], recursive: bool = True
) -> list[Path]:
    """将文件/目录混合列表展开为图片文件列表，保持输入顺序

    Args:
        paths: 文件或目录路径
        recursive: 目录是否递归搜索

    Returns:
        list[Path]: 图片文件路径（已跳过不存在和非图片的条目）
    """
    files: list[Path] = []
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            files.extend(find_image_files(path, recursive=recursive))
        elif not path.exists():
            logger.warning(MessageFormatter.file_not_found(path))
        elif not is_image_like(path):
            logger.warning(MessageFormatter.not_an_image(path))
        else:
            files.append(path)
    return files
