"""转换异常处理模块。

定义统一的异常类和错误处理机制，包含按处理阶段映射异常的装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class ConversionError(Exception):
    """转换相关错误基类（单个条目失败，不影响队列）"""

    def __init__(self, message: str, source_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.source_name = source_name


class DecodeError(ConversionError):
    """源图片无法读取或格式不支持"""

    pass


class EncodeError(ConversionError):
    """编码器拒绝参数或没有产生输出"""

    pass


class ConfigError(Exception):
    """预设数据格式错误

    只由严格解析抛出；load_all 捕获后回退到默认预设，不会传给用户。
    """

    pass


class QueueStateError(Exception):
    """非法的队列状态迁移"""

    pass


class PresetNotFoundError(LookupError):
    """指定 id 的预设不存在"""

    pass


# 按处理阶段映射异常的装饰器
def handle_image_errors(stage: str = "decode"):
    """将 Pillow 和系统异常转换为 DecodeError / EncodeError

    Args:
        stage: 处理阶段，"decode" 或 "encode"
    """
    error_class: type[ConversionError] = (
        EncodeError if stage == "encode" else DecodeError
    )
    operation = "图片编码" if stage == "encode" else "图片解码"

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ConversionError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation} - 无法识别图像格式: {e}")
                raise DecodeError(f"不支持的图像格式: {e}") from e
            except DecompressionBombError as e:
                logger.error(f"{operation} - 图像过大: {e}")
                raise DecodeError(f"图像文件过大，可能存在安全风险: {e}") from e
            except (OSError, SyntaxError) as e:
                logger.error(f"{operation} - 数据损坏: {e}")
                raise error_class(f"{operation}失败: {e}") from e
            except (ValueError, KeyError, TypeError) as e:
                logger.error(f"{operation} - 参数错误: {e}")
                raise error_class(f"{operation}参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    生成条目上显示的错误信息，并记录标准化日志。
    """

    @staticmethod
    def _log_error(
        operation: str, target: str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图片转换"）
            target: 相关条目或文件
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, target, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def describe(error: Exception) -> str:
        """条目上显示的错误信息"""
        match error:
            case ConversionError() as ce:
                return ce.message
            case _:
                return f"转换失败: {error}" if str(error) else "转换失败"

    @staticmethod
    def handle_item_error(error: Exception, target: str) -> str:
        """记录单个条目的失败并返回错误信息"""
        match error:
            case ConversionError():
                ErrorHandler._log_error("图片转换", target, error, "warning")
            case _:
                logger.exception(
                    MessageFormatter.format_error("图片转换（未预期错误）", target, error)
                )
        return ErrorHandler.describe(error)
