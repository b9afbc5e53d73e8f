"""顺序调度器模块。

同一时间只运行一个转换：按当前列表顺序逐个取出等待中的条目，
转换完成后写回队列，直到没有等待中的条目为止。
"""

import asyncio
from collections.abc import Awaitable, Callable

from ..core.transform import convert
from ..exceptions import ErrorHandler
from ..models.preset import Preset
from ..models.queue_item import ConvertedOutput, QueueStatus
from ..utils.logging_helpers import get_logger
from .queue import ConversionQueue


logger = get_logger()

Transform = Callable[[bytes, Preset], Awaitable[ConvertedOutput]]


class SequentialScheduler:
    """顺序调度器

    调度器是状态迁移的唯一写入者。没有超时和取消：
    卡住的转换会阻塞整个队列。
    """

    def __init__(self, queue: ConversionQueue, transform: Transform = convert):
        """初始化调度器

        Args:
            queue: 转换队列
            transform: 异步转换函数，默认使用 WebP 转换引擎
        """
        self.queue = queue
        self.transform = transform
        self._draining = False
        self._task: asyncio.Task[int] | None = None

    @property
    def is_draining(self) -> bool:
        return self._draining

    async def drain(self) -> int:
        """处理所有等待中的条目

        已在处理时直接返回 0，新入队的条目会被正在进行的处理拾取。

        Returns:
            int: 本次尝试转换的条目数
        """
        if self._draining:
            return 0

        self._draining = True
        attempted = 0
        logger.info("开始处理队列")
        self.queue.notify()
        try:
            while (item := self.queue.next_pending()) is not None:
                self.queue.set_status(item.id, QueueStatus.CONVERTING)
                attempted += 1

                try:
                    output = await self.transform(item.source, item.preset)
                except Exception as e:
                    message = ErrorHandler.handle_item_error(e, item.source_name)
                    written = self.queue.set_status(
                        item.id, QueueStatus.ERROR, error=message
                    )
                else:
                    written = self.queue.set_status(
                        item.id, QueueStatus.DONE, result=output
                    )

                if not written:
                    logger.debug(f"条目 {item.id} 已被移除，丢弃转换结果")
        finally:
            self._draining = False
            # 处理状态变化不修改条目，单独通知观察者
            self.queue.notify()

        logger.info(f"队列处理完成，共 {attempted} 个条目")
        return attempted

    def trigger(self) -> asyncio.Task[int]:
        """在当前事件循环中启动处理（已有处理任务时返回该任务）"""
        if self._task is not None and not self._task.done():
            return self._task

        self._task = asyncio.get_running_loop().create_task(self.drain())
        return self._task

    async def wait_idle(self) -> int:
        """等待当前处理任务结束"""
        if self._task is None:
            return 0
        return await self._task
