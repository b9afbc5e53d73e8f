"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import (
    expand_image_paths,
    find_image_files,
    is_image_like,
)
from .logging_helpers import get_logger, setup_logging
from .message_formatter import MessageFormatter
from .naming_helpers import derive_output_name, ensure_unique_path


__all__ = [
    "MessageFormatter",
    "derive_output_name",
    "ensure_unique_path",
    "expand_image_paths",
    "find_image_files",
    "get_logger",
    "is_image_like",
    "setup_logging",
]
