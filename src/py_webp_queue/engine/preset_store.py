"""预设持久化模块。

存储层只负责读写原始 JSON 文本；任何格式不符都视为"不存在"，
回退到内置默认预设，损坏的存储永远不会阻塞使用。
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from ..config import get_config
from ..exceptions import ConfigError
from ..models.preset import Preset, default_presets, normalize
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


class PresetStorage(Protocol):
    """预设存储协作者"""

    def read_presets(self) -> str | None: ...

    def write_presets(self, presets: Iterable[Preset]) -> None: ...


def dump_presets(presets: Iterable[Preset]) -> str:
    """序列化为持久化 JSON（camelCase 键，保持顺序）"""
    return json.dumps(
        [preset.to_storage_dict() for preset in presets],
        ensure_ascii=False,
        indent=2,
    )


class MemoryPresetStorage:
    """内存存储（测试和临时会话使用）"""

    def __init__(self, raw: str | None = None):
        self.raw = raw

    def read_presets(self) -> str | None:
        return self.raw

    def write_presets(self, presets: Iterable[Preset]) -> None:
        self.raw = dump_presets(presets)


class JsonFilePresetStorage:
    """JSON 文件存储，写入时先写临时文件再替换"""

    def __init__(self, preset_path: Path | None = None):
        self.preset_path = Path(preset_path or get_config().storage.PRESET_FILE)

    def read_presets(self) -> str | None:
        if not self.preset_path.exists():
            return None
        try:
            return self.preset_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                MessageFormatter.operation_failed("读取预设文件", self.preset_path, e)
            )
            return None

    def write_presets(self, presets: Iterable[Preset]) -> None:
        self.preset_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.preset_path.with_suffix(f"{self.preset_path.suffix}.tmp")
        tmp_path.write_text(dump_presets(presets), encoding="utf-8")
        tmp_path.replace(self.preset_path)


def decode_payload(raw: Any) -> list[Any]:
    """严格解析持久化数据的外层结构

    Raises:
        ConfigError: 数据不是 JSON 或不是列表
    """
    if isinstance(raw, str | bytes):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"预设数据损坏: {e}") from e

    if not isinstance(raw, list):
        raise ConfigError(f"预设数据不是列表（{type(raw).__name__}）")
    return raw


def parse_presets(raw: Any) -> list[Preset]:
    """解析持久化数据，任何不符都返回内置默认预设

    Args:
        raw: JSON 文本、已解析的列表或 None

    Returns:
        list[Preset]: 规范化后的预设列表，至少包含一个预设
    """
    if raw is None:
        return default_presets()

    try:
        items = decode_payload(raw)
    except ConfigError as e:
        logger.warning(f"{e}，使用默认预设")
        return default_presets()

    presets = [normalize(item) for item in items]
    return presets or default_presets()


def load_all(storage: PresetStorage) -> list[Preset]:
    """读取全部预设（失败时回退到内置默认预设）"""
    return parse_presets(storage.read_presets())


def save_all(storage: PresetStorage, presets: Iterable[Preset]) -> None:
    """保存全部预设，写入失败只记录日志"""
    try:
        storage.write_presets(list(presets))
    except OSError as e:
        logger.error(f"保存预设失败: {e}")
