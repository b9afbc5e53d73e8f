"""转换预设模型。

预设是不可变的值对象：编辑预设会生成新的实例（同一 id），
入队时复制快照，已入队的条目不会受到后续编辑的影响。
"""

import math
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .constants import PresetLimits, QualityDefaults, clamp, round_half_up


class Preset(BaseModel):
    """转换预设（尺寸上限、质量、预缩小比例）"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1, description="预设标识")
    name: str = Field("", description="显示名称")
    max_width: int | None = Field(None, gt=0, alias="maxWidth", description="最大宽度")
    max_height: int | None = Field(
        None, gt=0, alias="maxHeight", description="最大高度"
    )
    quality: int = Field(
        QualityDefaults.DEFAULT,
        ge=QualityDefaults.MIN_QUALITY,
        le=QualityDefaults.MAX_QUALITY,
        description="输出质量",
    )
    reduce_percent: int = Field(
        PresetLimits.DEFAULT_REDUCE_PERCENT,
        ge=PresetLimits.MIN_REDUCE_PERCENT,
        le=PresetLimits.MAX_REDUCE_PERCENT,
        alias="reducePercent",
        description="预缩小百分比",
    )

    @property
    def has_size_cap(self) -> bool:
        """是否设置了尺寸上限"""
        return self.max_width is not None or self.max_height is not None

    @property
    def encoder_quality(self) -> float:
        """编码器质量（0.01-1.00）"""
        return self.quality / 100

    def with_changes(self, **changes: Any) -> "Preset":
        """返回修改后的新预设，字段同样经过 normalize

        修改项可使用 snake_case 或 camelCase 键。
        """
        data = self.model_dump(by_alias=True)
        data.update(changes)
        return normalize(data)

    def to_storage_dict(self) -> dict[str, Any]:
        """持久化格式（camelCase 键）"""
        return self.model_dump(by_alias=True)

    def get_summary(self) -> str:
        width = self.max_width or "---"
        height = self.max_height or "---"
        return f"{width}×{height} Q{self.quality} -{self.reduce_percent}%"


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _normalize_id(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return uuid.uuid4().hex


def _normalize_dimension(value: Any) -> int | None:
    if not _is_finite_number(value) or value <= 0:
        return None
    rounded = round_half_up(value)
    # 小于 1 像素的上限视为不限制
    return rounded if rounded >= PresetLimits.MIN_DIMENSION else None


def _normalize_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    if not _is_finite_number(value):
        return default
    return clamp(round_half_up(value), minimum, maximum)


def normalize(raw: Any) -> Preset:
    """将任意输入规范化为合法的预设，永不失败

    Args:
        raw: 预设字典（camelCase 或 snake_case 键）、Preset 实例或任意值

    Returns:
        Preset: 合法的预设；超出范围的数值被截断，非法数值使用默认值
    """
    if isinstance(raw, Preset):
        data: Mapping[str, Any] = raw.model_dump()
    elif isinstance(raw, Mapping):
        data = raw
    else:
        data = {}

    name = _pick(data, "name")

    return Preset(
        id=_normalize_id(_pick(data, "id")),
        name=name if isinstance(name, str) else "",
        max_width=_normalize_dimension(_pick(data, "max_width", "maxWidth")),
        max_height=_normalize_dimension(_pick(data, "max_height", "maxHeight")),
        quality=_normalize_int(
            _pick(data, "quality"),
            QualityDefaults.DEFAULT,
            QualityDefaults.MIN_QUALITY,
            QualityDefaults.MAX_QUALITY,
        ),
        reduce_percent=_normalize_int(
            _pick(data, "reduce_percent", "reducePercent"),
            PresetLimits.DEFAULT_REDUCE_PERCENT,
            PresetLimits.MIN_REDUCE_PERCENT,
            PresetLimits.MAX_REDUCE_PERCENT,
        ),
    )


def upsert(presets: Iterable[Preset], preset: Preset) -> list[Preset]:
    """按 id 替换已有预设，不存在时追加到末尾"""
    result = list(presets)
    for index, existing in enumerate(result):
        if existing.id == preset.id:
            result[index] = preset
            return result
    result.append(preset)
    return result


def remove(presets: Iterable[Preset], preset_id: str) -> list[Preset]:
    """移除指定 id 的预设（调用方负责重新选择当前预设）"""
    return [p for p in presets if p.id != preset_id]


DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(id="original", name="ORIGINAL", quality=90),
    Preset(id="large", name="1920px", max_width=1920, max_height=1920, quality=85),
    Preset(id="medium", name="1280px", max_width=1280, max_height=1280, quality=85),
    Preset(id="small", name="800px", max_width=800, max_height=800, quality=80),
    Preset(id="thumb", name="400px", max_width=400, max_height=400, quality=75),
)


def default_presets() -> list[Preset]:
    """内置默认预设列表（新列表，可自由修改）"""
    return list(DEFAULT_PRESETS)
