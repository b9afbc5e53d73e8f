"""批量 WebP 转换 MCP 服务器。

把预设管理、入队、进度查询和导出暴露为 MCP 工具（stdio 传输）。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .converter import QueueConverter
from .exceptions import PresetNotFoundError
from .models import Preset, QueuedItem, TargetCodec
from .utils.logging_helpers import get_logger, setup_logging
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def not_found(message: str, identifier: str | None = None) -> dict[str, Any]:
        """构建对象不存在的错误结果"""
        details = {"id": identifier} if identifier else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="not_found",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果"""
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )


setup_logging()
logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量 WebP 转换服务")

_conversion_defaults = get_config().conversion

# 全局转换器实例（首次使用时创建）
_converter: QueueConverter | None = None


def get_converter() -> QueueConverter:
    """获取全局转换器实例"""
    global _converter
    if _converter is None:
        _converter = QueueConverter()
    return _converter


def _format_preset(preset: Preset, selected_id: str | None = None) -> dict[str, Any]:
    return {
        **preset.to_storage_dict(),
        "summary": preset.get_summary(),
        "selected": preset.id == selected_id,
    }


def _format_item(item: QueuedItem) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": item.id,
        "source_name": item.source_name,
        "origin_path": str(item.origin_path) if item.origin_path else None,
        "preset": item.preset.name or item.preset.id,
        "status": item.status.value,
        "label": item.get_status_label(),
        "error": item.error,
    }
    if item.result is not None:
        result.update(
            {
                "original_size": item.result.original_size,
                "converted_size": item.result.converted_size,
                "savings_percent": item.result.savings_percent,
                "final_dimensions": item.result.final_dimensions,
            }
        )
    return result


def _queue_status() -> MCPResponse:
    converter = get_converter()
    summary = converter.summary()
    return {
        "success": True,
        "summary": summary.get_summary(),
        "is_draining": summary.is_draining,
        "counts": summary.model_dump(exclude={"is_draining"}),
        "items": [_format_item(item) for item in converter.snapshot()],
    }


# ============================================================================
# 预设工具
# ============================================================================


@mcp.tool()
def list_presets() -> MCPResponse:
    """列出全部转换预设及当前选中的预设"""
    converter = get_converter()
    selected_id = converter.selected_preset.id
    return {
        "success": True,
        "selected": selected_id,
        "presets": [_format_preset(p, selected_id) for p in converter.presets],
    }


@mcp.tool()
def save_preset(
    name: str,
    quality: int = _conversion_defaults.QUALITY,
    max_width: int | None = None,
    max_height: int | None = None,
    reduce_percent: int = _conversion_defaults.REDUCE_PERCENT,
    preset_id: str | None = None,
) -> MCPResponse:
    """新建或编辑转换预设

    Args:
        name: 预设名称
        quality: 输出质量 1-100
        max_width: 最大宽度（像素，None 为不限制）
        max_height: 最大高度（像素，None 为不限制）
        reduce_percent: 预缩小百分比 0-95
        preset_id: 编辑已有预设时传入其 id

    Returns:
        dict: 保存后的预设（超出范围的数值会被截断）
    """
    preset = get_converter().save_preset(
        {
            "id": preset_id,
            "name": name,
            "quality": quality,
            "maxWidth": max_width,
            "maxHeight": max_height,
            "reducePercent": reduce_percent,
        }
    )
    return {"success": True, "preset": _format_preset(preset)}


@mcp.tool()
def delete_preset(preset_id: str) -> MCPResponse:
    """删除转换预设"""
    converter = get_converter()
    if not converter.delete_preset(preset_id):
        return MCPResponseBuilder.not_found(
            MessageFormatter.preset_not_found(preset_id), preset_id
        )
    return {"success": True, "selected": converter.selected_preset.id}


@mcp.tool()
def select_preset(preset_id: str) -> MCPResponse:
    """选中预设，之后入队的图片使用该预设"""
    try:
        preset = get_converter().select_preset(preset_id)
    except PresetNotFoundError as e:
        return MCPResponseBuilder.not_found(str(e), preset_id)
    return {"success": True, "preset": _format_preset(preset, preset.id)}


# ============================================================================
# 队列工具
# ============================================================================


@mcp.tool()
async def enqueue_images(
    paths: list[str] | str,
    preset_id: str | None = None,
    recursive: bool = True,
) -> MCPResponse:
    """将图片文件（或目录中的图片）加入转换队列并在后台开始转换

    Args:
        paths: 文件或目录路径
        preset_id: 使用的预设，默认为当前选中的预设
        recursive: 目录是否递归

    Returns:
        dict: 新入队的条目和队列状态
    """
    converter = get_converter()
    path_list = [paths] if isinstance(paths, str) else paths

    try:
        preset = converter.get_preset(preset_id) if preset_id else None
    except PresetNotFoundError as e:
        return MCPResponseBuilder.not_found(str(e), preset_id)

    items = converter.enqueue_files(path_list, recursive=recursive, preset=preset)
    if not items:
        return MCPResponseBuilder.file_error(
            "没有找到可转换的图片文件", ", ".join(path_list)
        )

    return {
        **_queue_status(),
        "enqueued": [item.id for item in items],
    }


@mcp.tool()
def get_queue_status() -> MCPResponse:
    """获取队列快照、各状态数量和节省的总大小"""
    return _queue_status()


@mcp.tool()
async def wait_for_queue() -> MCPResponse:
    """等待队列中全部等待中的条目处理完成"""
    await get_converter().run_until_idle()
    return _queue_status()


@mcp.tool()
def remove_queue_item(item_id: str) -> MCPResponse:
    """从队列移除条目（转换中的条目移除后其结果会被丢弃）"""
    if not get_converter().remove(item_id):
        return MCPResponseBuilder.not_found(
            MessageFormatter.item_not_found(item_id), item_id
        )
    return _queue_status()


@mcp.tool()
def clear_queue() -> MCPResponse:
    """清空队列"""
    removed = get_converter().clear()
    return {**_queue_status(), "removed": removed}


@mcp.tool()
def export_converted(output_dir: str, item_id: str | None = None) -> MCPResponse:
    """将已完成的条目导出为 .webp 文件

    Args:
        output_dir: 输出目录
        item_id: 只导出指定条目，默认导出全部已完成条目

    Returns:
        dict: 写入的文件列表
    """
    try:
        written = get_converter().export(Path(output_dir), item_id)
    except OSError as e:
        logger.error(MessageFormatter.operation_failed("导出", output_dir, e))
        return MCPResponseBuilder.file_error(str(e), output_dir)

    return {
        "success": True,
        "files": [str(path) for path in written],
        "count": len(written),
    }


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    if not TargetCodec.is_available():
        logger.error("当前 Pillow 不支持 WebP 编码，所有转换都会失败")

    logger.info("启动批量 WebP 转换 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
