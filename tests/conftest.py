"""测试配置文件。

提供测试所需的fixtures和配置。
"""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_webp_queue.engine.preset_store import MemoryPresetStorage
from py_webp_queue.models import ConvertedOutput, Preset


def _solid(mode: str, value: int) -> int | tuple[int, ...]:
    match mode:
        case "RGB":
            return (value, 30, 30)
        case "RGBA":
            return (value, 30, 30, 128)
        case "LA":
            return (value, 128)
        case _:
            return value


def make_image_bytes(
    size: tuple[int, int] = (64, 48),
    mode: str = "RGB",
    fmt: str = "PNG",
) -> bytes:
    """生成带少量图形的测试图片数据"""
    base_mode = "RGB" if mode == "P" else mode
    img = Image.new(base_mode, size, color=_solid(base_mode, 200))
    draw = ImageDraw.Draw(img)
    width, height = size
    draw.rectangle(
        [width // 4, height // 4, width // 2, height // 2], fill=_solid(base_mode, 40)
    )
    if mode == "P":
        img = img.convert("P")

    buffer = BytesIO()
    img.save(buffer, fmt)
    return buffer.getvalue()


def fake_output(source: bytes, preset: Preset) -> ConvertedOutput:
    """不经过编码器的转换结果（调度器测试使用）"""
    converted_size = max(1, len(source) // 2)
    return ConvertedOutput(
        original_size=max(1, len(source)),
        converted_size=converted_size,
        blob=b"w" * converted_size,
        preset=preset,
    )


@pytest.fixture
def preset() -> Preset:
    return Preset(id="test", name="TEST", max_width=800, max_height=800, quality=80)


@pytest.fixture
def storage() -> MemoryPresetStorage:
    """空的内存预设存储"""
    return MemoryPresetStorage()


@pytest.fixture
def image_files(tmp_path: Path) -> list[Path]:
    """临时目录中的测试图片文件"""
    files = []
    for index, size in enumerate([(320, 240), (100, 400), (50, 50)]):
        path = tmp_path / "input" / f"photo_{index}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(make_image_bytes(size))
        files.append(path)
    return files
