"""队列条目与转换结果模型。

定义队列条目状态、单个转换结果和队列汇总的数据结构。
"""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .constants import QueueDefaults, TargetCodec, round_half_up
from .preset import Preset


class QueueStatus(str, Enum):
    """队列条目状态"""

    PENDING = "pending"
    CONVERTING = "converting"
    DONE = "done"
    ERROR = "error"


# 合法的状态迁移，done/error 为终态
ALLOWED_TRANSITIONS: dict[QueueStatus, frozenset[QueueStatus]] = {
    QueueStatus.PENDING: frozenset({QueueStatus.CONVERTING}),
    QueueStatus.CONVERTING: frozenset({QueueStatus.DONE, QueueStatus.ERROR}),
    QueueStatus.DONE: frozenset(),
    QueueStatus.ERROR: frozenset(),
}


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class ConvertedOutput(BaseModel):
    """单个图片的转换结果"""

    model_config = ConfigDict(frozen=True)

    original_size: int = Field(gt=0, description="原始大小（字节）")
    converted_size: int = Field(gt=0, description="转换后大小（字节）")
    blob: bytes = Field(repr=False, description="编码后的数据")
    preset: Preset = Field(description="使用的预设")
    format_used: str = Field(TargetCodec.FORMAT, description="输出格式")
    original_dimensions: tuple[int, int] | None = Field(None, description="原始尺寸")
    final_dimensions: tuple[int, int] | None = Field(None, description="输出尺寸")

    @property
    def encoder_quality(self) -> float:
        return self.preset.encoder_quality

    @property
    def savings_percent(self) -> int:
        """节省百分比，文件变大时为负数"""
        return round_half_up((1 - self.converted_size / self.original_size) * 100)

    def get_size_saved(self) -> int:
        """节省的字节数（可能为负）"""
        return self.original_size - self.converted_size

    def get_summary(self) -> str:
        """转换结果摘要"""
        return (
            f"{format_size(self.original_size)} → {format_size(self.converted_size)} "
            f"({self.savings_percent}%)"
        )


class QueuedItem(BaseModel):
    """队列中的一个待转换图片

    预设为入队时的快照；每次状态变化都会生成新的条目对象。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="条目标识")
    source: bytes = Field(repr=False, description="源图片数据")
    source_name: str = Field(QueueDefaults.UNNAMED_SOURCE, description="源文件名")
    origin_path: Path | None = Field(None, description="源文件路径")
    preset: Preset = Field(description="入队时的预设快照")
    status: QueueStatus = Field(QueueStatus.PENDING, description="当前状态")
    result: ConvertedOutput | None = Field(None, description="转换结果")
    error: str | None = Field(None, description="错误信息")
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def source_size(self) -> int:
        return len(self.source)

    @property
    def is_finished(self) -> bool:
        """是否已到终态"""
        return self.status in (QueueStatus.DONE, QueueStatus.ERROR)

    def get_status_label(self) -> str:
        match self.status:
            case QueueStatus.DONE if self.result is not None:
                return self.result.get_summary()
            case QueueStatus.ERROR:
                return self.error or "ERROR"
            case QueueStatus.CONVERTING:
                return "CONVERTING..."
            case _:
                return self.status.value.upper()


class QueueSummary(BaseModel):
    """队列汇总（供进度观察者使用）"""

    total: int = 0
    pending: int = 0
    converting: int = 0
    done: int = 0
    error: int = 0
    total_saved: int = Field(0, description="已完成条目节省的总字节数")
    is_draining: bool = False

    @property
    def downloadable(self) -> int:
        """可导出的条目数（失败条目不计入）"""
        return self.done

    def get_summary(self) -> str:
        text = f"{self.done}/{self.total} CONVERTED"
        if self.error:
            text += f", {self.error} FAILED"
        if self.total_saved > 0:
            text += f", -{format_size(self.total_saved)} SAVED"
        return text

    @classmethod
    def from_items(
        cls, items: tuple[QueuedItem, ...], is_draining: bool = False
    ) -> "QueueSummary":
        counts = {status: 0 for status in QueueStatus}
        total_saved = 0
        for item in items:
            counts[item.status] += 1
            if item.result is not None:
                total_saved += item.result.get_size_saved()

        return cls(
            total=len(items),
            pending=counts[QueueStatus.PENDING],
            converting=counts[QueueStatus.CONVERTING],
            done=counts[QueueStatus.DONE],
            error=counts[QueueStatus.ERROR],
            total_saved=total_saved,
            is_draining=is_draining,
        )
