"""转换队列引擎模块。

包含队列状态机、顺序调度器和预设持久化。
"""

from .preset_store import (
    JsonFilePresetStorage,
    MemoryPresetStorage,
    PresetStorage,
    decode_payload,
    load_all,
    parse_presets,
    save_all,
)
from .queue import ConversionQueue
from .scheduler import SequentialScheduler


__all__ = [
    "ConversionQueue",
    "JsonFilePresetStorage",
    "MemoryPresetStorage",
    "PresetStorage",
    "SequentialScheduler",
    "decode_payload",
    "load_all",
    "parse_presets",
    "save_all",
]
