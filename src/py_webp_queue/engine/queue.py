"""转换队列状态机模块。

队列是条目状态的唯一数据源。每次修改都整体替换条目元组，
观察者在修改完成后收到新的快照，不会看到部分更新。
"""

from collections.abc import Callable, Iterable
from pathlib import Path

from ..exceptions import QueueStateError
from ..models.constants import QueueDefaults
from ..models.preset import Preset
from ..models.queue_item import (
    ALLOWED_TRANSITIONS,
    ConvertedOutput,
    QueuedItem,
    QueueStatus,
    QueueSummary,
)
from ..utils.logging_helpers import get_logger


logger = get_logger()

QueueSnapshot = tuple[QueuedItem, ...]
QueueObserver = Callable[[QueueSnapshot], None]
SourceEntry = tuple[bytes, str | Path | None]


class ConversionQueue:
    """转换队列状态机

    支持入队、状态更新（仅调度器调用）、按 id 移除和清空。
    """

    def __init__(self) -> None:
        self._items: QueueSnapshot = ()
        self._observers: list[QueueObserver] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._items)

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    def snapshot(self) -> QueueSnapshot:
        """当前队列快照（按列表顺序）"""
        return self._items

    def get(self, item_id: str) -> QueuedItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def next_pending(self) -> QueuedItem | None:
        """按当前列表顺序返回第一个等待中的条目"""
        return next(
            (item for item in self._items if item.status == QueueStatus.PENDING), None
        )

    def summary(self, is_draining: bool = False) -> QueueSummary:
        return QueueSummary.from_items(self._items, is_draining=is_draining)

    # ------------------------------------------------------------------
    # 修改
    # ------------------------------------------------------------------

    def enqueue(
        self, sources: Iterable[SourceEntry], preset: Preset
    ) -> list[QueuedItem]:
        """将源图片追加到队尾，绑定入队时的预设快照

        Args:
            sources: (源数据, 源路径或文件名) 序列
            preset: 当前选中的预设

        Returns:
            list[QueuedItem]: 新建的条目
        """
        snapshot = preset.model_copy()
        new_items = [
            self._build_item(source, origin, snapshot) for source, origin in sources
        ]
        if not new_items:
            return []

        self._replace(self._items + tuple(new_items))
        logger.info(f"入队 {len(new_items)} 个条目，预设: {snapshot.name or snapshot.id}")
        return new_items

    def set_status(
        self,
        item_id: str,
        status: QueueStatus,
        result: ConvertedOutput | None = None,
        error: str | None = None,
    ) -> bool:
        """更新条目状态（仅调度器调用）

        Returns:
            bool: 条目不存在时返回 False，本次写入被丢弃

        Raises:
            QueueStateError: 非法的状态迁移
        """
        current = self.get(item_id)
        if current is None:
            return False

        if status not in ALLOWED_TRANSITIONS[current.status]:
            raise QueueStateError(
                f"非法的状态迁移: {current.status.value} → {status.value} ({item_id})"
            )

        updated = current.model_copy(
            update={"status": status, "result": result, "error": error}
        )
        self._replace(
            tuple(updated if item.id == item_id else item for item in self._items)
        )
        logger.debug(f"条目 {item_id}: {current.status.value} → {status.value}")
        return True

    def remove(self, item_id: str) -> bool:
        """按 id 移除条目（转换中的条目也可移除，结果将被丢弃）"""
        remaining = tuple(item for item in self._items if item.id != item_id)
        if len(remaining) == len(self._items):
            return False
        self._replace(remaining)
        return True

    def clear(self) -> int:
        """清空队列，返回移除的条目数"""
        count = len(self._items)
        if count:
            self._replace(())
        return count

    # ------------------------------------------------------------------
    # 观察者
    # ------------------------------------------------------------------

    def subscribe(self, observer: QueueObserver) -> Callable[[], None]:
        """订阅队列变化，返回取消订阅函数"""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def notify(self) -> None:
        """用当前快照通知全部观察者（条目不变时也可调用，如处理状态变化）"""
        for observer in list(self._observers):
            try:
                observer(self._items)
            except Exception:
                logger.exception("队列观察者回调失败")

    def _replace(self, items: QueueSnapshot) -> None:
        self._items = items
        self.notify()

    @staticmethod
    def _build_item(
        source: bytes, origin: str | Path | None, preset: Preset
    ) -> QueuedItem:
        origin_path = Path(origin) if origin else None
        return QueuedItem(
            source=source,
            source_name=origin_path.name if origin_path else QueueDefaults.UNNAMED_SOURCE,
            origin_path=origin_path,
            preset=preset,
        )
