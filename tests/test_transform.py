"""转换引擎测试。"""

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from py_webp_queue.config import reset_config
from py_webp_queue.core.formats import FormatProcessor, get_save_parameters
from py_webp_queue.core.transform import convert, convert_sync
from py_webp_queue.exceptions import DecodeError, EncodeError
from py_webp_queue.models import ConvertedOutput, Preset
from tests.conftest import make_image_bytes


def open_blob(blob: bytes) -> Image.Image:
    img = Image.open(BytesIO(blob))
    img.load()
    return img


class TestConvert:
    """WebP 转换测试"""

    def test_width_limited_output(self):
        """1600×1200 源图在 800 上限下输出 800×600 的 WebP"""
        source = make_image_bytes((1600, 1200))
        preset = Preset(id="p", max_width=800, max_height=800, quality=80)

        output = convert_sync(source, preset)

        assert output.original_size == len(source)
        assert output.converted_size == len(output.blob) > 0
        assert output.original_dimensions == (1600, 1200)
        assert output.final_dimensions == (800, 600)
        assert output.preset == preset
        with open_blob(output.blob) as img:
            assert img.format == "WEBP"
            assert img.size == (800, 600)

    def test_reduce_percent_output(self):
        source = make_image_bytes((1000, 500))
        output = convert_sync(source, Preset(id="p", reduce_percent=50))

        with open_blob(output.blob) as img:
            assert img.size == (500, 250)

    def test_small_source_not_enlarged(self):
        source = make_image_bytes((120, 90))
        output = convert_sync(source, Preset(id="p", max_width=800, max_height=800))
        assert output.final_dimensions == (120, 90)

    @pytest.mark.parametrize("mode", ["RGBA", "L", "LA", "P"])
    def test_color_modes(self, mode):
        """各种色彩模式都能编码为 WebP"""
        output = convert_sync(make_image_bytes((40, 30), mode=mode), Preset(id="p"))
        with open_blob(output.blob) as img:
            assert img.mode in ("RGB", "RGBA")

    def test_jpeg_source(self):
        output = convert_sync(make_image_bytes((200, 100), fmt="JPEG"), Preset(id="p"))
        assert output.format_used == "WEBP"

    def test_lower_quality_is_smaller(self):
        source = make_image_bytes((400, 300))
        high = convert_sync(source, Preset(id="h", quality=100))
        low = convert_sync(source, Preset(id="l", quality=5))
        assert low.converted_size <= high.converted_size

    def test_async_convert(self):
        source = make_image_bytes((300, 200))
        output = asyncio.run(convert(source, Preset(id="p", max_width=150)))
        assert output.final_dimensions == (150, 100)


class TestConvertErrors:
    """转换错误测试"""

    def test_corrupt_source(self):
        with pytest.raises(DecodeError):
            convert_sync(b"definitely not an image", Preset(id="p"))

    def test_truncated_source(self):
        source = make_image_bytes((200, 200))
        with pytest.raises(DecodeError):
            convert_sync(source[: len(source) // 3], Preset(id="p"))

    def test_empty_source(self):
        with pytest.raises(DecodeError):
            convert_sync(b"", Preset(id="p"))

    def test_empty_encoder_output(self, monkeypatch):
        """编码器没有产生输出时报告 EncodeError"""
        source = make_image_bytes((20, 20))
        monkeypatch.setattr(Image.Image, "save", lambda self, fp, **kwargs: None)
        with pytest.raises(EncodeError):
            convert_sync(source, Preset(id="p"))

    def test_encoder_failure(self, monkeypatch):
        source = make_image_bytes((20, 20))

        def failing_save(self, fp, **kwargs):
            raise OSError("encoder rejected parameters")

        monkeypatch.setattr(Image.Image, "save", failing_save)
        with pytest.raises(EncodeError, match="encoder rejected"):
            convert_sync(source, Preset(id="p"))

    def test_decompression_bomb(self, monkeypatch):
        """超过像素上限的源图报告 DecodeError"""
        source = make_image_bytes((100, 100))
        monkeypatch.setenv("PWQ_MAX_IMAGE_PIXELS", "100")
        reset_config()
        try:
            with pytest.raises(DecodeError, match="图像文件过大"):
                convert_sync(source, Preset(id="p"))
        finally:
            monkeypatch.undo()
            reset_config()

    def test_async_errors_propagate(self):
        with pytest.raises(DecodeError):
            asyncio.run(convert(b"\x00\x01", Preset(id="p")))


class TestFormats:
    """格式准备测试"""

    def test_palette_with_transparency_keeps_alpha(self):
        img = Image.new("P", (4, 4))
        img.info["transparency"] = 0
        assert FormatProcessor().prepare_for_webp(img).mode == "RGBA"

    def test_cmyk_to_rgb(self):
        img = Image.new("CMYK", (4, 4))
        assert FormatProcessor().prepare_for_webp(img).mode == "RGB"

    def test_save_parameters_use_preset_quality(self):
        params = get_save_parameters(Preset(id="p", quality=42))
        assert params["format"] == "WEBP"
        assert params["quality"] == 42
        assert params["lossless"] is False


class TestConvertedOutput:
    """转换结果测试"""

    def make(self, original: int, converted: int) -> ConvertedOutput:
        return ConvertedOutput(
            original_size=original,
            converted_size=converted,
            blob=b"x",
            preset=Preset(id="p", quality=75),
        )

    def test_savings_percent(self):
        assert self.make(1000, 250).savings_percent == 75

    def test_negative_savings(self):
        """文件变大时节省百分比为负"""
        output = self.make(1000, 1500)
        assert output.savings_percent == -50
        assert output.get_size_saved() == -500

    def test_savings_round_half_up(self):
        assert self.make(1000, 995).savings_percent == 1

    def test_encoder_quality_scale(self):
        assert self.make(10, 5).encoder_quality == 0.75

    def test_summary(self):
        summary = self.make(2048, 1024).get_summary()
        assert "KiB" in summary
        assert "50%" in summary
