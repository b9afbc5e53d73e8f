"""数据模型包。

定义预设、队列条目和转换结果的数据结构。
"""

from .constants import (
    PresetLimits,
    QualityDefaults,
    QueueDefaults,
    TargetCodec,
    clamp,
    round_half_up,
)
from .preset import (
    DEFAULT_PRESETS,
    Preset,
    default_presets,
    normalize,
    remove,
    upsert,
)
from .queue_item import (
    ALLOWED_TRANSITIONS,
    ConvertedOutput,
    QueuedItem,
    QueueStatus,
    QueueSummary,
    format_size,
)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "DEFAULT_PRESETS",
    "ConvertedOutput",
    "Preset",
    "PresetLimits",
    "QualityDefaults",
    "QueueDefaults",
    "QueueStatus",
    "QueueSummary",
    "QueuedItem",
    "TargetCodec",
    "clamp",
    "default_presets",
    "format_size",
    "normalize",
    "remove",
    "round_half_up",
    "upsert",
]
