"""批量 WebP 转换器接口。

组合预设库、当前选中预设、转换队列和顺序调度器，
为 UI/拖放/文件选择等外部协作者提供统一入口。
"""

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from .core.transform import convert
from .engine.preset_store import (
    JsonFilePresetStorage,
    PresetStorage,
    load_all,
    save_all,
)
from .engine.queue import ConversionQueue, QueueObserver, SourceEntry
from .engine.scheduler import SequentialScheduler, Transform
from .exceptions import PresetNotFoundError
from .models import (
    Preset,
    QueuedItem,
    QueueStatus,
    QueueSummary,
    default_presets,
    normalize,
    remove,
    upsert,
)
from .utils.file_helpers import expand_image_paths
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import derive_output_name, ensure_unique_path


logger = get_logger()


class QueueConverter:
    """批量 WebP 转换器。

    外部协作者只负责入队和读取状态，条目状态只由调度器修改。
    """

    def __init__(
        self,
        storage: PresetStorage | None = None,
        transform: Transform = convert,
    ):
        """初始化转换器。

        Args:
            storage: 预设存储，默认使用配置中的 JSON 文件
            transform: 异步转换函数（测试时可替换）
        """
        self.storage = storage if storage is not None else JsonFilePresetStorage()
        self.presets: list[Preset] = load_all(self.storage)
        self.selected_preset: Preset = self.presets[0]
        self.queue = ConversionQueue()
        self.scheduler = SequentialScheduler(self.queue, transform)

        logger.debug(f"初始化转换器，共 {len(self.presets)} 个预设")

    # ------------------------------------------------------------------
    # 预设
    # ------------------------------------------------------------------

    def get_preset(self, preset_id: str) -> Preset:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        raise PresetNotFoundError(MessageFormatter.preset_not_found(preset_id))

    def select_preset(self, preset_id: str) -> Preset:
        """选中预设，之后的入队使用该预设"""
        self.selected_preset = self.get_preset(preset_id)
        return self.selected_preset

    def save_preset(self, raw: Preset | dict[str, Any]) -> Preset:
        """新建或编辑预设（按 id 覆盖）

        编辑当前选中的预设时同步更新选中状态；已入队的条目保持原快照。
        """
        preset = normalize(raw)
        self.presets = upsert(self.presets, preset)
        if self.selected_preset.id == preset.id:
            self.selected_preset = preset
        self._persist()
        return preset

    def update_selected(self, **changes: Any) -> Preset:
        """修改当前选中预设的字段（如质量、缩小比例）"""
        return self.save_preset(self.selected_preset.with_changes(**changes))

    def delete_preset(self, preset_id: str) -> bool:
        """删除预设；删除选中预设时回退到第一个预设"""
        remaining = remove(self.presets, preset_id)
        if len(remaining) == len(self.presets):
            return False

        # 预设列表不允许为空
        self.presets = remaining or default_presets()
        if self.selected_preset.id == preset_id or self.selected_preset not in self.presets:
            self.selected_preset = self.presets[0]
        self._persist()
        return True

    def _persist(self) -> None:
        save_all(self.storage, self.presets)

    # ------------------------------------------------------------------
    # 队列
    # ------------------------------------------------------------------

    def enqueue(
        self, sources: Iterable[SourceEntry], preset: Preset | None = None
    ) -> list[QueuedItem]:
        """入队源图片并在事件循环中启动处理

        Args:
            sources: (源数据, 源路径或文件名) 序列
            preset: 使用的预设，默认为当前选中的预设

        Returns:
            list[QueuedItem]: 新建的条目
        """
        items = self.queue.enqueue(sources, preset or self.selected_preset)
        if items:
            self._kick()
        return items

    def enqueue_files(
        self,
        paths: Iterable[str | Path],
        recursive: bool = True,
        preset: Preset | None = None,
    ) -> list[QueuedItem]:
        """读取文件并入队，目录会被展开为其中的图片文件"""
        sources: list[SourceEntry] = []
        for file_path in expand_image_paths(list(paths), recursive=recursive):
            try:
                sources.append((file_path.read_bytes(), file_path))
            except OSError as e:
                logger.warning(MessageFormatter.operation_failed("读取文件", file_path, e))
        return self.enqueue(sources, preset)

    def _kick(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # 没有运行中的事件循环，由调用方执行 process_pending
            return
        self.scheduler.trigger()

    async def run_until_idle(self) -> int:
        """启动（或等待已有的）处理，直到没有等待中的条目"""
        self.scheduler.trigger()
        return await self.scheduler.wait_idle()

    def process_pending(self) -> int:
        """同步处理全部等待中的条目（脚本使用）"""
        return asyncio.run(self.scheduler.drain())

    def remove(self, item_id: str) -> bool:
        return self.queue.remove(item_id)

    def clear(self) -> int:
        return self.queue.clear()

    def snapshot(self) -> tuple[QueuedItem, ...]:
        return self.queue.snapshot()

    def summary(self) -> QueueSummary:
        return self.queue.summary(is_draining=self.scheduler.is_draining)

    @property
    def is_draining(self) -> bool:
        return self.scheduler.is_draining

    def subscribe(self, observer: QueueObserver) -> Callable[[], None]:
        return self.queue.subscribe(observer)

    # ------------------------------------------------------------------
    # 导出
    # ------------------------------------------------------------------

    def export(self, output_dir: str | Path, item_id: str | None = None) -> list[Path]:
        """将已完成条目写入目录，文件名为 <原文件名>.webp

        Args:
            output_dir: 输出目录
            item_id: 只导出指定条目，默认导出全部已完成条目

        Returns:
            list[Path]: 写入的文件路径
        """
        output_dir = Path(output_dir)
        items = [
            item
            for item in self.queue.snapshot()
            if item.status == QueueStatus.DONE
            and item.result is not None
            and (item_id is None or item.id == item_id)
        ]
        if not items:
            return []

        output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for item in items:
            target = ensure_unique_path(
                output_dir / derive_output_name(item.source_name), set(written)
            )
            target.write_bytes(item.result.blob)
            written.append(target)

        logger.info(f"导出 {len(written)} 个文件到 {output_dir}")
        return written
